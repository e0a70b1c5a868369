from importlib import import_module

__all__ = [
    "dexscreener_client",
    "DexScreenerClient",
    "universe_manager",
    "UniverseManager",
    "universe_scheduler",
    "UniverseScheduler",
]

_LAZY_EXPORTS = {
    "dexscreener_client": ("services.dexscreener", "dexscreener_client"),
    "DexScreenerClient": ("services.dexscreener", "DexScreenerClient"),
    "universe_manager": ("services.universe.manager", "universe_manager"),
    "UniverseManager": ("services.universe.manager", "UniverseManager"),
    "universe_scheduler": ("services.universe.scheduler", "universe_scheduler"),
    "UniverseScheduler": ("services.universe.scheduler", "UniverseScheduler"),
}


def __getattr__(name):
    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module 'services' has no attribute {name!r}")

    module_name, attr_name = _LAZY_EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
