from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import CartChangedMessage, UserLogoutMessage
from utils.pure import generate_markdown_table
from views.modal_dialog import LogoutDialogModal, QuitDialogModal


class Sidebar(Container):
    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Label("", id="label-cart-badge")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    def on_mount(self) -> None:
        self.screen.refresh_sidebar()

    async def refresh_session(self) -> None:
        """Rebuild user info and menu, the user may have changed since last shown."""
        state = self.app.state
        if not state.user:
            return

        table_rows = [
            ["Username", state.user.username],
            ["Name", state.user.name],
            ["Role", state.user.role.title()],
        ]
        await self.query_one("#md-userinfo", Markdown).update(
            generate_markdown_table(None, table_rows, ["l", "l"])
        )

        modes = self.app.modes_for(state.role)
        list_menu = self.query_one("#list-menu", ListView)
        await list_menu.clear()
        await list_menu.extend(
            [ListItem(Label(v), id="list-menu-item-" + k) for k, v in modes.items()]
        )
        if self.app.current_mode in modes:
            list_menu.index = list(modes).index(self.app.current_mode)

        self.refresh_cart_badge()

    def refresh_cart_badge(self) -> None:
        badge = self.query_one("#label-cart-badge", Label)
        state = self.app.state
        badge.display = state.role == "buyer"
        badge.update(f"Cart: {state.cart_count} item(s)")

    async def on_list_view_selected(self, event: ListView.Selected) -> None:
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        if self.app.current_mode != selected_mode:
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-logout")
    @work
    async def handle_logout(self) -> None:
        if not await self.app.push_screen_wait(
            LogoutDialogModal(self.app.state.user.username)
        ):
            return

        self.post_message(UserLogoutMessage())


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.

    Subclasses redraw their own content in refresh_view(), which runs
    whenever the screen becomes current or the cart changes.
    """

    BINDINGS = [
        Binding("ctrl+x", "request_quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "",
        show_sidebar: bool = True,
    ) -> None:
        self.app.title = "My Shop"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v):
                self.sub_title = self.app.MODE_LABELS.get(k, header_sub_title)

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @work(exclusive=True, group="sidebar")
    async def refresh_sidebar(self) -> None:
        for sidebar in self.query(Sidebar):
            await sidebar.refresh_session()

    async def refresh_view(self) -> None:
        pass

    @on(ScreenResume)
    async def handle_screen_resume(self) -> None:
        self.refresh_sidebar()
        await self.refresh_view()

    @on(CartChangedMessage)
    async def handle_cart_changed(self) -> None:
        for sidebar in self.query(Sidebar):
            sidebar.refresh_cart_badge()
        await self.refresh_view()

    @work()
    async def action_request_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
