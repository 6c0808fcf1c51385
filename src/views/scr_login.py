from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, Input, Label, Select, TabbedContent, TabPane

from db.models import ROLES, AuthForm
from utils.errors import StorefrontError
from views.base_screen import BaseScreen
from views.modal_dialog import QuitDialogModal

ROLE_OPTIONS = [(role.title(), role) for role in ROLES]

TAB_MODES = {"tab-login": "login", "tab-signup": "signup"}


class LoginScreen(BaseScreen):
    """
    Login and signup tabs. Dismissed once a user is logged in.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Login", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-loginscr", initial="tab-" + self.app.state.auth_mode):
            with TabPane("Login", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("Username")
                    yield Input(placeholder="jane", id="input-login-username")
                    yield Label("Role")
                    yield Select(ROLE_OPTIONS, prompt="Select Role", id="select-login-role")
                    with Horizontal(id="div-login-btns"):
                        yield Button("Quit", id="btn-quit")
                        yield Button("Login", id="btn-login", variant="primary")

            with TabPane("Sign up", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield Label("Username")
                    yield Input(placeholder="jane", id="input-reg-username")
                    yield Label("Name")
                    yield Input(placeholder="Jane Doe", id="input-reg-name")
                    yield Label("Role")
                    yield Select(ROLE_OPTIONS, prompt="Select Role", id="select-reg-role")
                    with Container(id="div-reg-btns"):
                        yield Button("Create Account", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-username").focus()

    def on_tabbed_content_tab_activated(self, event: TabbedContent.TabActivated) -> None:
        # the pane carried by the event, the container's active id can lag behind it
        pane_id = event.pane.id if event.pane is not None else None
        if pane_id in TAB_MODES:
            self.app.state.set_auth_mode(TAB_MODES[pane_id])

    def _selected_role(self, select_id: str) -> str:
        value = self.query_one(select_id, Select).value
        return value if isinstance(value, str) else ""

    def _read_form(self) -> AuthForm:
        if self.app.state.auth_mode == "signup":
            return AuthForm.from_raw(
                self.query_one("#input-reg-username", Input).value,
                self.query_one("#input-reg-name", Input).value,
                self._selected_role("#select-reg-role"),
            )
        return AuthForm.from_raw(
            self.query_one("#input-login-username", Input).value,
            "",
            self._selected_role("#select-login-role"),
        )

    @on(Input.Submitted)
    @on(Button.Pressed, "#btn-login")
    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_auth_submit(self) -> None:
        try:
            form = self._read_form()
            user = await self.app.state.authenticate(form)
        except StorefrontError as e:
            self.notify(str(e), severity="error")
            return

        self.notify(f"Hello {user.name}!")
        self.dismiss()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
