import pytest

from src import config
from src.formview.context import TestContext
from src.formview.dashboard import DashboardPage
from src.formview.errors import SettleTimeout, VerificationTimeout
from src.formview.shared_form import SharedFormPage

from fakes import FakeElement, sel


@pytest.fixture
def project_ctx():
    return TestContext(
        project_id="p_1",
        project_title="fv_demo",
        base_id="ds_1",
        token="tok",
        base_url="http://localhost:3000",
        api_url="http://localhost:8080",
    )


@pytest.fixture
def dashboard(kit, project_ctx):
    return DashboardPage(kit, project_ctx)


def test_project_url(project_ctx):
    assert project_ctx.project_url == "http://localhost:3000/#/nc/p_1"


def test_goto_project(dashboard, driver):
    dashboard.goto_project()
    assert driver.visited[-1] == "http://localhost:3000/#/nc/p_1"
    assert dashboard.url == "http://localhost:3000/#/nc/p_1"


def test_goto_project_fails_when_page_never_settles(dashboard, driver):
    driver.settled = False
    with pytest.raises(SettleTimeout, match="after goto"):
        dashboard.goto_project()


def test_toast_verify_contains(dashboard, driver):
    driver.add(sel("toast", "notice"), FakeElement("Saved"), FakeElement(config.MESSAGES["smtp_missing"]))
    dashboard.toast.verify("Please activate SMTP plugin")
    with pytest.raises(VerificationTimeout):
        dashboard.toast.verify("Plugin uninstalled successfully", timeout=0.05)


def test_toast_verify_logs_under_toast_category(dashboard, driver, caplog):
    driver.add(sel("toast", "notice"), FakeElement(config.MESSAGES["view_created"]))
    with caplog.at_level("INFO", logger="formview.tests"):
        dashboard.toast.verify(config.MESSAGES["view_created"])
    assert any(r.getMessage().startswith("[TOAST] Toast shown") for r in caplog.records)


def test_create_attachment_column_picks_type_from_dropdown(dashboard, driver):
    header = FakeElement("Attachment")
    save = FakeElement("Save", on_click=lambda _el: driver.add(sel("grid", "header", title="Attachment"), header))
    type_input = FakeElement()
    options = [FakeElement("Attachment"), FakeElement("LongText")]
    name_input = FakeElement(attrs={"value": ""})
    driver.add(sel("grid", "column_add"), FakeElement("+"))
    driver.add(sel("grid", "column_name_input"), name_input)
    driver.add(sel("grid", "column_type_input"), type_input)
    driver.add(sel("grid", "column_type_option"), *options)
    driver.add(sel("grid", "column_save"), save)

    dashboard.grid.column.create("Attachment", "attachment")

    assert name_input.value == "Attachment"
    assert type_input.clicks == 1
    assert [o.clicks for o in options] == [1, 0]
    assert save.clicks == 1


def test_create_text_column_skips_type_dropdown(dashboard, driver):
    type_input = FakeElement()
    save = FakeElement("Save", on_click=lambda _el: driver.add(sel("grid", "header", title="Title"), FakeElement("Title")))
    driver.add(sel("grid", "column_add"), FakeElement("+"))
    driver.add(sel("grid", "column_name_input"), FakeElement(attrs={"value": ""}))
    driver.add(sel("grid", "column_type_input"), type_input)
    driver.add(sel("grid", "column_save"), save)

    dashboard.grid.column.create("Title")

    assert type_input.clicks == 0


def test_verify_view_by_index(dashboard, driver):
    driver.add(sel("view_sidebar", "view_titles"), FakeElement("Country"), FakeElement("CountryForm"))
    dashboard.view_sidebar.verify_view("CountryForm", 1)
    with pytest.raises(VerificationTimeout) as exc:
        dashboard.view_sidebar.verify_view("CountryForm", 2)
    assert exc.value.observed is None


def test_open_view_matches_exact_title(dashboard, driver):
    grid_view = FakeElement("Country")
    form_view = FakeElement("CountryForm")
    driver.add(sel("view_sidebar", "view_titles"), grid_view, form_view)
    dashboard.view_sidebar.open_view("Country")
    assert (grid_view.clicks, form_view.clicks) == (1, 0)


def test_close_tab_missing_ok(dashboard):
    assert dashboard.close_tab(config.TEAM_AUTH_TAB, missing_ok=True) is False


def test_close_tab(dashboard, driver):
    close = FakeElement()
    tab = FakeElement(config.TEAM_AUTH_TAB, children={sel("dashboard", "tab_close"): [close]})
    close.on_click = lambda _el: driver.dom[sel("dashboard", "tab")].remove(tab)
    driver.add(sel("dashboard", "tab"), tab)
    assert dashboard.close_tab(config.TEAM_AUTH_TAB) is True
    assert close.clicks == 1


def test_open_table_waits_for_tab(dashboard, driver):
    entry = FakeElement("City List")
    entry.on_click = lambda _el: driver.add(sel("dashboard", "tab"), FakeElement("City List"))
    driver.add(sel("tree_view", "table", title="CityList"), entry)
    dashboard.tree_view.open_table("City List")
    assert entry.clicks == 1


def test_grid_cells(dashboard, driver):
    driver.add(sel("grid", "cell", column="Country", index=3), FakeElement("USA"))
    chips = FakeElement(children={sel("grid", "chip"): [FakeElement("Atlanta")]})
    driver.add(sel("grid", "cell", column="CityList", index=3), chips)

    dashboard.grid.cell.verify(3, "Country", "USA")
    dashboard.grid.cell.verify_virtual_cell(3, "CityList", 1, ["Atlanta"])
    with pytest.raises(ValueError):
        dashboard.grid.cell.verify_virtual_cell(3, "CityList", 2, ["Atlanta"])


def test_share_link(dashboard, driver):
    driver.add(sel("toolbar", "share_link"), FakeElement("http://localhost:3000/#/nc/form/abc"))
    assert dashboard.form.toolbar.share_view.get_share_link() == "http://localhost:3000/#/nc/form/abc"


class TestSharedForm:
    @pytest.fixture
    def root(self, driver):
        root = FakeElement()
        driver.add(sel("shared_form", "root"), root)
        return root

    @pytest.fixture
    def shared(self, kit, root):
        return SharedFormPage(kit)

    def test_fill_text_in_cell(self, shared, root):
        text_input = FakeElement(attrs={"value": ""})
        root.add(
            sel("shared_form", "cell", field="Country"),
            FakeElement(children={sel("shared_form", "text_input"): [text_input]}),
        )
        shared.cell.fill_text("Country", "USA")
        assert text_input.value == "USA"

    def test_child_list(self, shared, driver):
        cards = [FakeElement(c) for c in ("Atlanta", "Pune", "London", "Sydney")]
        driver.add(sel("shared_form", "child_list_card"), *cards)
        shared.verify_child_list(["Atlanta", "Pune", "London", "Sydney"])
        shared.select_child_list("Atlanta")
        assert [c.clicks for c in cards] == [1, 0, 0, 0]

    def test_submit_success(self, shared, driver):
        submit = FakeElement("Submit")
        submit.on_click = lambda _el: driver.add(
            sel("shared_form", "success"), FakeElement(config.MESSAGES["form_submitted"])
        )
        driver.add(sel("shared_form", "submit"), submit)
        shared.submit()
        shared.verify_success_message()

    def test_attachment_upload(self, shared, root, tmp_path):
        f = tmp_path / "sampleImage.png"
        f.write_bytes(b"\x89PNG")
        file_input = FakeElement()
        root.add(
            sel("shared_form", "cell", field="Attachment"),
            FakeElement(children={sel("shared_form", "file_input"): [file_input]}),
        )
        shared.cell.attachment("Attachment").add_file(f)
        assert file_input.sent == [(str(f.resolve()),)]
