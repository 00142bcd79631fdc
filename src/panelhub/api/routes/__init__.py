# src/panelhub/api/routes/__init__.py - Route module registry
import importlib
import traceback

# Short module name -> register function, registered in this order
ROUTE_MODULES = [
    ("auth", "register_auth_routes"),
    ("panel", "register_panel_routes"),
    ("admin", "register_admin_routes"),
    ("user", "register_user_routes"),
    ("system", "register_system_routes"),
]


def _load_register_function(module_name, func_name):
    module = importlib.import_module(f"{__name__}.{module_name}")
    register_fn = getattr(module, func_name, None)
    if not callable(register_fn):
        raise AttributeError(f"{func_name} missing from {module.__name__}")
    return register_fn


def register_all_routes(app, dependencies):
    """
    Register every module in ROUTE_MODULES. A module that cannot be loaded is
    reported and skipped; the summary lands in app.config['ROUTE_LOAD_RESULTS'].
    """
    logger = dependencies["logger"]
    loaded, failed = [], {}

    for module_name, func_name in ROUTE_MODULES:
        try:
            register_fn = _load_register_function(module_name, func_name)
        except (ImportError, AttributeError) as e:
            failed[module_name] = str(e)
            logger.error(f"Route module {module_name} not loaded: {e}")
            logger.debug(traceback.format_exc())
            continue

        register_fn(app, dependencies)
        loaded.append(module_name)
        logger.debug(f"Route module {module_name} registered")

    results = {"ok": not failed, "loaded": loaded, "failed": failed}
    app.config["ROUTE_LOAD_RESULTS"] = results
    return results
