import logging
import time
from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse
from core.errors import ResourceNotFound, ResourceInternalError
from services.factory import get_service_factory, ServiceFactory

router = APIRouter()
logger = logging.getLogger(__name__)

NOT_FOUND_TEXT = "资源文件不存在"
INTERNAL_ERROR_TEXT = "内部错误"


def _get_factory() -> ServiceFactory:
    return get_service_factory()


@router.get("/resource")
@router.get("/powerbi-image", include_in_schema=False)
def get_resource(factory: ServiceFactory = Depends(_get_factory)):
    """
    返回当前资源文件。200 为图片字节；404 / 500 为纯文本。
    /powerbi-image 是旧路径，保留给已部署的前端。
    """
    try:
        svc = factory.create("resource")
    except KeyError:
        logger.error("Resource service not registered")
        return PlainTextResponse(INTERNAL_ERROR_TEXT, status_code=500)

    start_pc = time.perf_counter()
    try:
        content = svc.get_resource()
    except ResourceNotFound as e:
        elapsed_ms = (time.perf_counter() - start_pc) * 1000
        logger.warning("get-resource NotFound: %s; elapsed_ms=%.2fms", e, elapsed_ms)
        return PlainTextResponse(NOT_FOUND_TEXT, status_code=404)
    except ResourceInternalError as e:
        elapsed_ms = (time.perf_counter() - start_pc) * 1000
        logger.exception("get-resource Internal: %s; elapsed_ms=%.2fms", e, elapsed_ms)
        return PlainTextResponse(INTERNAL_ERROR_TEXT, status_code=500)
    except Exception as e:
        elapsed_ms = (time.perf_counter() - start_pc) * 1000
        logger.exception("get-resource unexpected error: %s; elapsed_ms=%.2fms", e, elapsed_ms)
        return PlainTextResponse(INTERNAL_ERROR_TEXT, status_code=500)

    elapsed_ms = (time.perf_counter() - start_pc) * 1000
    logger.info("get-resource success: bytes=%d media_type=%s elapsed_ms=%.2fms",
                len(content), svc.media_type, elapsed_ms)

    return Response(content=content, media_type=svc.media_type, headers={"Cache-Control": "no-store"})
