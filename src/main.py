from typing import Dict, Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.widgets import LoadingIndicator

from db.storage import SqliteStorage
from utils.config import Settings, load_settings
from utils.logger import get_logger
from utils.messages import QuitRequestedMessage, UserLogoutMessage
from utils.state import StorefrontState
from views.scr_cart import CartScreen
from views.scr_catalog import CatalogScreen
from views.scr_login import LoginScreen
from views.scr_seller_dashboard import SellerDashboardScreen

_logger = get_logger(__name__)


class StorefrontApp(App):
    MODES = {
        "catalog": CatalogScreen,
        "cart": CartScreen,
        "seller": SellerDashboardScreen,
    }

    MODE_LABELS = {
        "catalog": "Products",
        "cart": "Your Cart",
        "seller": "Seller Dashboard",
    }

    # first entry is where the role lands after login
    ROLE_MODES = {
        "buyer": ["catalog", "cart"],
        "seller": ["seller", "catalog"],
    }

    CSS_PATH = "styles/storefront.tcss"

    state: StorefrontState
    settings: Settings

    def __init__(
        self,
        state: Optional[StorefrontState] = None,
        settings: Optional[Settings] = None,
    ):
        super().__init__()
        self.settings = settings or load_settings()
        self.state = state or StorefrontState(
            storage=SqliteStorage(),
            clear_cart_on_logout=self.settings.clear_cart_on_logout,
        )

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        await self.state.restore()
        self.main_flow()

    def modes_for(self, role: Optional[str]) -> Dict[str, str]:
        return {mode: self.MODE_LABELS[mode] for mode in self.ROLE_MODES.get(role, [])}

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.state.logout()
        self.notify("Logout successful.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()

    @work(exclusive=True, group="main-flow")
    async def main_flow(self):
        if self.state.role not in self.ROLE_MODES:
            if self.state.user is not None:
                _logger.warning(f"Dropping session with unknown role {self.state.role!r}.")
                await self.state.logout()
            await self.push_screen_wait(LoginScreen())

        landing = self.ROLE_MODES[self.state.role][0]
        _logger.debug(f"Mode {self.current_mode} -> {landing}")
        await self.switch_mode(landing)


def run() -> None:
    StorefrontApp().run()


if __name__ == "__main__":
    run()
