from genui.config.settings import (
    GenUIRuntimeSettings,
    configure_genui_runtime,
    get_genui_runtime_settings,
    load_genui_config,
    reset_genui_runtime,
)

__all__ = [
    "GenUIRuntimeSettings",
    "configure_genui_runtime",
    "get_genui_runtime_settings",
    "load_genui_config",
    "reset_genui_runtime",
]
