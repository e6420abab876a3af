#####################################################
#                                                   #
#                앱 상태 정의 및 관리                  #
#                                                   #
#####################################################

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator
from livetranslate.logs.logging_util import LoggerSingleton
from contextlib import asynccontextmanager
from livetranslate.config.clients import initialize_clients
from livetranslate.config.exception import register_exception_handlers
from livetranslate.config.settings import Settings
from livetranslate.auth.router import router as auth_router
from livetranslate.speech.router import router as speech_router
from livetranslate.translation.router import router as translation_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        r"""
 ##       ######   ##  ##   #####            ######   #####     ####    ##  ##    #####
 ##         ##     ##  ##   ##                 ##     ##  ##   ##  ##   ### ##   ##
 ##         ##     ##  ##   ####               ##     #####    ######   ######    ####
 ##         ##      ####    ##                 ##     ## ##    ##  ##   ## ###       ##
 ######   ######     ##     #####              ##     ##  ##   ##  ##   ##  ##   #####
"""
    )

    # 설정은 시작 시 한 번만 읽고 컨테이너를 통해 주입
    settings = Settings.from_env()
    client_container = initialize_clients(settings)
    app.state.client_container = client_container
    logger.info(
        f"\n{'=' * 80}\n"
        f"| database={'on' if client_container.session_store.available else 'off'} "
        f"speech={'on' if settings.speech_configured else 'off'} "
        f"translator={'on' if settings.translator_configured else 'off'} "
        f"summary={'on' if client_container.openai_client is not None else 'off'}\n"
        f"{'=' * 80}\n"
    )

    yield
    # 종료시 클린업 작업
    await client_container.aclose()
    logger.info(
        r"""
                           🛑 ENGINE SHUTDOWN 🛑
    """
    )

# FastAPI 앱 인스턴스 생성
app = FastAPI(title="LiveTranslate API", lifespan=lifespan)

# Prometheus FastAPI 미들웨어 설정
Instrumentator().instrument(app).expose(app)

# 전역 예외 핸들러
register_exception_handlers(app)

# 라우터 등록
routers = [auth_router, translation_router, speech_router]

for router in routers:
    app.include_router(router)


@app.get("/health")
async def health():
    return {"ok": True}

# 로거 설정
logger = LoggerSingleton.get_logger(logger_name="app")
