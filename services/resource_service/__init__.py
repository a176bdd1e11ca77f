from .api import router
from .service import ResourceService

__all__ = ["router", "ResourceService"]


def register(factory, settings=None, **service_kwargs):
    if settings is not None:
        service_kwargs.setdefault("resource_path", settings.RESOURCE_PATH)
        service_kwargs.setdefault("media_type", settings.RESOURCE_MEDIA_TYPE)

    factory.register("resource", lambda **kw: ResourceService(**{**service_kwargs, **kw}))
