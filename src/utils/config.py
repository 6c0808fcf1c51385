import os
from dataclasses import dataclass


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings, read from the environment.

    Fields:
      - db_path: sqlite file backing the key-value store
      - clear_cart_on_logout: drop cart lines when the user logs out
      - import_dir: root directory shown in the seller's import file tree
      - debug: verbose logging
    """

    db_path: str = "data/storefront.sqlite"
    clear_cart_on_logout: bool = False
    import_dir: str = "."
    debug: bool = False


def load_settings() -> Settings:
    return Settings(
        db_path=os.getenv("STOREFRONT_DB", Settings.db_path),
        clear_cart_on_logout=_env_flag("STOREFRONT_CLEAR_CART_ON_LOGOUT"),
        import_dir=os.getenv("STOREFRONT_IMPORT_DIR", Settings.import_dir),
        debug=bool(os.getenv("DEBUG")),
    )
