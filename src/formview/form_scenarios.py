# src/formview/form_scenarios.py
"""
Built-in form view scenarios. Each body runs against a fresh project.
"""
from __future__ import annotations

from typing import Iterable

from .app_store import AccountAppStorePage
from .context import ScenarioContext
from .errors import ActionPreconditionFailed
from .field_configs import FieldConfig, HeaderConfig, SMTPConfig
from .fixtures import sample_file
from .form_view import FormPage
from .scenarios import Scenario
from .shared_form import SharedFormPage
from .types import FormEntry, PostSubmitMode
from .. import config

FORM_VIEW = "CountryForm"
COUNTRY_FIELDS = ["Country", "LastUpdate", "City List"]


def _fill_and_submit(form: FormPage, entries: Iterable[FormEntry]) -> None:
    report = form.fill_form(entries)
    if not report.ok:
        failed = ", ".join(f.field for f in report.failures)
        raise ActionPreconditionFailed("fill_form", f"could not fill: {failed}")
    form.submit_form()


def _open_country_form(ctx: ScenarioContext) -> FormPage:
    dashboard = ctx.dashboard
    dashboard.close_tab(config.TEAM_AUTH_TAB, missing_ok=True)
    dashboard.tree_view.open_table("Country")
    dashboard.view_sidebar.create_form_view(FORM_VIEW)
    dashboard.view_sidebar.verify_view(FORM_VIEW, index=1)
    return dashboard.form


def field_reorder_operations(ctx: ScenarioContext) -> None:
    form = _open_country_form(ctx)
    form.verify_fields_order(COUNTRY_FIELDS)

    form.reorder_fields("LastUpdate", "Country")
    form.verify_fields_order(["LastUpdate", "Country", "City List"])

    form.remove_field("City List", "drag_drop")
    form.verify_fields_order(["LastUpdate", "Country"])
    form.add_field("City List", "drag_drop")
    form.verify_fields_order(["LastUpdate", "Country", "City List"])

    form.remove_field("City List", "hide_field")
    form.verify_fields_order(["LastUpdate", "Country"])
    form.add_field("City List", "click_field")
    form.verify_fields_order(["LastUpdate", "Country", "City List"])

    # the display value column cannot be hidden
    form.remove_all_fields()
    form.verify_fields_order(["Country"])
    form.add_all_fields()
    form.verify_fields_order(["LastUpdate", "Country", "City List"])


def form_elements_validation(ctx: ScenarioContext) -> None:
    dashboard = ctx.dashboard
    form = _open_country_form(ctx)
    app_store = AccountAppStorePage(ctx.kit)
    entries = [FormEntry("Country", "_abc", kind="single_line_text")]

    header = HeaderConfig(title="Country", subtitle="Country subtitle")
    form.configure_header(header)
    form.verify_header(header)

    form.configure_field(
        "Country",
        FieldConfig(label="Country new title", help_text="Country new description", required=True),
    )
    form.verify_field_label(0, "Country new title")
    form.verify_field_help_text(0, "Country new description")

    form.configure_field("Country", FieldConfig(label="Country", help_text="", required=True))
    form.verify_field_label(0, "Country")
    form.verify_field_help_text(0, "")

    form.remove_all_fields()
    form.verify_fields_order(["Country"])

    # default message
    _fill_and_submit(form, entries)
    form.verify_state_post_submit(message=config.MESSAGES["form_submitted"])

    # custom message
    dashboard.view_sidebar.open_view(FORM_VIEW)
    form.configure_submit_message("Custom submit message")
    _fill_and_submit(form, entries)
    form.verify_state_post_submit(message="Custom submit message")

    # submit another form
    dashboard.view_sidebar.open_view(FORM_VIEW)
    form.set_post_submit_mode(PostSubmitMode.ALLOW_RESUBMIT)
    form.verify_active_post_submit_mode(PostSubmitMode.ALLOW_RESUBMIT)
    _fill_and_submit(form, entries)
    form.verify_state_post_submit(submit_another_form=True)
    form.submit_another_form()

    # blank form after 5 seconds
    form.set_post_submit_mode(PostSubmitMode.SHOW_BLANK_AFTER_DELAY)
    form.verify_active_post_submit_mode(PostSubmitMode.SHOW_BLANK_AFTER_DELAY)
    _fill_and_submit(form, entries)
    form.verify_state_post_submit(show_blank_form=True)

    # email notification is refused while SMTP is not installed
    form.set_post_submit_mode(PostSubmitMode.EMAIL_NOTIFY)
    dashboard.toast.verify(config.MESSAGES["smtp_missing"])
    form.verify_active_post_submit_mode(PostSubmitMode.DEFAULT)
    form.clear_post_submit_mode(PostSubmitMode.EMAIL_NOTIFY)
    url = dashboard.url

    app_store.goto()
    app_store.install("SMTP")
    app_store.configure_smtp(SMTPConfig(email="a@b.com", host="smtp.gmail.com", port="587"))

    dashboard.goto(url)
    dashboard.view_sidebar.open_view(FORM_VIEW)
    form.set_post_submit_mode(PostSubmitMode.EMAIL_NOTIFY)
    form.verify_after_submit_menu_state({
        PostSubmitMode.EMAIL_NOTIFY: True,
        PostSubmitMode.ALLOW_RESUBMIT: False,
        PostSubmitMode.SHOW_BLANK_AFTER_DELAY: False,
    })

    app_store.goto()
    app_store.uninstall("SMTP")


def form_share_attachment(ctx: ScenarioContext) -> None:
    dashboard = ctx.dashboard
    dashboard.tree_view.create_table("New")
    dashboard.grid.column.create("Attachment", "attachment")

    dashboard.view_sidebar.create_form_view("NewForm")
    dashboard.form.toolbar.click_share_view()
    link = dashboard.form.toolbar.share_view.get_share_link()

    shared = SharedFormPage(ctx.kit)
    shared.goto(link)
    shared.cell.attachment("Attachment").add_file(sample_file("sampleImage.png"))
    shared.cell.fill_text("Title", "Text")
    shared.submit()
    shared.verify_success_message()


def form_view_with_links(ctx: ScenarioContext) -> None:
    dashboard = ctx.dashboard
    dashboard.tree_view.open_table("Country")
    url = dashboard.url

    dashboard.view_sidebar.create_form_view("NewForm")
    dashboard.form.toolbar.click_share_view()
    link = dashboard.form.toolbar.share_view.get_share_link()

    shared = SharedFormPage(ctx.kit)
    shared.goto(link)
    shared.cell.fill_text("Country", "USA")
    shared.click_link_to_child_list()
    shared.verify_child_list(["Atlanta", "Pune", "London", "Sydney"])
    shared.select_child_list("Atlanta")
    shared.submit()
    shared.verify_success_message()

    dashboard.goto(url)
    dashboard.view_sidebar.open_view("Country")
    dashboard.grid.cell.verify(3, "Country", "USA")
    dashboard.grid.cell.verify_virtual_cell(3, "CityList", 1, ["Atlanta"])


SCENARIOS: dict[str, Scenario] = {
    s.name: s
    for s in (
        Scenario("field_reorder", field_reorder_operations, seed="country_city", tags=("form", "fields")),
        Scenario("form_elements", form_elements_validation, seed="country_city", tags=("form", "plugin")),
        Scenario("form_share_attachment", form_share_attachment, tags=("form", "share")),
        Scenario("form_view_links", form_view_with_links, seed="country_city_links", tags=("form", "share", "links")),
    )
}
