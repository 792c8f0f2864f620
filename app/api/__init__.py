import importlib
import logging
import pkgutil

logger = logging.getLogger(__name__)


def include_routers(app, package_name, package_path):
    """패키지 안에서 router를 가진 모든 모듈을 앱에 등록"""
    # pkgutil.iter_modules를 사용하여 패키지 내의 모든 모듈을 찾음
    for _, module_name, _ in sorted(pkgutil.iter_modules(package_path), key=lambda m: m[1]):
        module = importlib.import_module(f"app.{package_name}.{module_name}")
        if hasattr(module, "router"):
            app.include_router(module.router)
            logger.debug(f"Router included: {module_name}")
