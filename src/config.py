import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Base URL of the app under test (dev instance if you have it)
FV_BASE_URL = os.getenv("FV_BASE_URL", "http://localhost:3000").rstrip("/")

# Backend used by the fixture seeder; the UI and API are served separately in dev
FV_API_URL = os.getenv("FV_API_URL", "http://localhost:8080").rstrip("/")

# Common entry points (hash router)
FV_SIGNIN_URL = f"{FV_BASE_URL}/#/signin"
FV_PROJECTS_URL = f"{FV_BASE_URL}/#/"
FV_APP_STORE_URL = f"{FV_BASE_URL}/#/account/apps"

# Credentials from environment variables
FV_USER_EMAIL = os.getenv("FV_USER_EMAIL", "user@nocodb.com")
FV_USER_PASSWORD = os.getenv("FV_USER_PASSWORD", "Password123.")

# Explicit wait time for Selenium + Headless mode
WAIT_TIME = int(os.getenv("FV_WAIT_TIME", "10"))
IMPLICIT_WAIT = int(os.getenv("FV_IMPLICIT_WAIT", "0"))
HEADLESS = os.getenv("HEADLESS", "false").lower() == "true"

# Verification budget: poll every POLL_INTERVAL seconds for up to VERIFY_TIMEOUT seconds
VERIFY_TIMEOUT = float(os.getenv("FV_VERIFY_TIMEOUT", "10"))
POLL_INTERVAL = float(os.getenv("FV_POLL_INTERVAL", "0.25"))

# Settle budget after an action (document ready + spinners gone)
SETTLE_TIMEOUT = float(os.getenv("FV_SETTLE_TIMEOUT", "5"))

# The app shows a blank form this many seconds after submit when the option is on
BLANK_FORM_DELAY_S = 5.0

# --- Instrumentation / diagnostics ---
LOG_MODE = os.getenv("FV_LOG_MODE", "live").lower()  # live | debug | trace
LOG_RATE_LIMITS_S = {
    "LOCATE.resolve": 0.5,
}

# Where run logs + JSON reports land
RUNS_DIR = Path(os.getenv("FV_RUNS_DIR", "runs"))

# Bundled YAML seed plans + sample upload files
FIXTURES_DIR = Path(os.getenv("FV_FIXTURES_DIR", Path(__file__).resolve().parent.parent / "fixtures"))

# Org segment used by the data API routes
API_ORG = "noco"

# Default "Team & Auth" tab opened alongside a fresh project
TEAM_AUTH_TAB = "Team & Auth"

# Messages the app emits that scenarios assert on
MESSAGES = {
    "form_submitted": "Successfully submitted form data",
    "smtp_missing": "Please activate SMTP plugin in App store for enabling email notification",
    "smtp_installed": "Successfully installed and email notification will use SMTP configuration",
    "plugin_uninstalled": "Plugin uninstalled successfully",
    "view_created": "View created successfully",
}

# Elements that indicate the UI is still busy after an action
BUSY_SELECTORS = ".ant-spin-spinning, .nprogress-busy, .ant-btn-loading"

# Class the antd checkbox wrapper carries while checked
CHECKED_CLASS = "ant-checkbox-wrapper-checked"

# Semantic locator registry. Templates take {field}/{title}/{name}/{index}
# parameters rendered from visible labels, never from DOM position.
FORM_SELECTORS = {
    "dashboard": {
        "root": "body",
        "tab": ".ant-tabs-tab",
        "tab_close": ".ant-tabs-tab-remove",
        "project_link": ".nc-project-title",
    },
    "tree_view": {
        "table": ".nc-project-tree-tbl-{title}",
        "add_table": ".nc-add-new-table",
        "modal_input": ".ant-modal-body input",
        "modal_submit": ".ant-modal-footer button.ant-btn-primary",
    },
    "view_sidebar": {
        "create_form": ".nc-create-form-view",
        "view_titles": ".nc-views-menu .ant-menu-title-content",
        "modal_input": ".ant-modal-body input",
        "modal_submit": ".ant-modal-footer button.ant-btn-primary",
    },
    "toast": {
        "notice": ".ant-message .ant-message-notice-content",
    },
    "form": {
        "root": "[data-testid='nc-form-wrapper']",
        "after_submit": "[data-testid='nc-form-wrapper-submit']",
        "fields": "[data-testid='nc-form-fields']",
        "field_drag": ".nc-form-drag-{field}",
        "field_label": "[data-testid='nc-form-input-label']",
        "field_help_text": ".nc-form-help-text",
        "field_input": "[data-testid='nc-form-input-{field}']",
        "field_remove_icon": "[data-testid='nc-field-remove-icon']",
        "label_input": "input[data-testid='nc-form-input-label']",
        "help_text_input": "input[data-testid='nc-form-input-help-text']",
        "required_switch": "[data-testid='nc-form-input-required'] + button",
        "hidden_column": "[data-testid='nc-form-hidden-column-{field}']",
        "hidden_column_body": "[data-testid='nc-form-hidden-column-{field}'] > div.ant-card-body",
        "hidden_columns": "[data-testid^='nc-form-hidden-column-']",
        "hide_drop_zone": "[data-testid='nc-drag-n-drop-to-hide']",
        "add_all": "[data-testid='nc-form-add-all']",
        "remove_all": "[data-testid='nc-form-remove-all']",
        "heading": "[data-testid='nc-form-heading']",
        "sub_heading": "[data-testid='nc-form-sub-heading']",
        "after_submit_msg": "[data-testid='nc-form-after-submit-msg']",
        "submit": "[data-testid='nc-form-submit']",
        "after_submit_button": "button",
        "validation_error": ".ant-form-item-explain-error",
        "checkbox_submit_another": "[data-testid='nc-form-checkbox-submit-another-form']",
        "checkbox_show_blank": "[data-testid='nc-form-checkbox-show-blank-form']",
        "checkbox_send_email": "[data-testid='nc-form-checkbox-send-email']",
    },
    "toolbar": {
        "share_view": ".nc-btn-share-view",
        "share_link": "[data-testid='nc-modal-share-view__link']",
    },
    "grid": {
        "column_add": ".nc-column-add",
        "column_name_input": ".nc-column-name-input",
        "column_type_input": ".nc-column-type-input",
        "column_type_option": ".rc-virtual-list-holder-inner .ant-select-item-option",
        "column_save": ".nc-column-edit-save, .ant-form button.ant-btn-primary",
        "cell": "td[data-pw='cell-{column}-{index}']",
        "chip": ".chip",
        "header": "th[data-title='{title}']",
    },
    "shared_form": {
        "root": ".nc-shared-form-view, [data-testid='nc-shared-form-view']",
        "cell": "[data-testid='nc-form-input-cell-{field}']",
        "text_input": "input, textarea",
        "file_input": "input[type='file']",
        "submit": "[data-testid='shared-form-submit-button']",
        "success": ".ant-alert-success",
        "child_list_link": "button[data-testid='nc-child-list-button-link-to']",
        "child_list_card": ".ant-modal.active .ant-card",
    },
    "app_store": {
        "card": ".nc-app-store-card-{name}",
        "install": ".nc-app-store-card-install",
        "reset": ".nc-app-store-card-reset",
        "smtp_email": "#form_item_from",
        "smtp_host": "#form_item_host",
        "smtp_port": "#form_item_port",
        "save": ".nc-action-btn-save, .ant-modal button.ant-btn-primary",
        "confirm": ".ant-modal button.ant-btn-primary",
    },
}
