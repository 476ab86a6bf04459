from fastapi import HTTPException, Request, Response, status
from loguru import logger

from secret_injector.admission.injector import SecretInjector
from secret_injector.admission.review import handle_review
from secret_injector.config import InjectorConfig
from secret_injector.exceptions import EncodeError
from secret_injector.responses import HealthResponse
from secret_injector.server import WebServer, configure_logging

JSON_CONTENT_TYPE = "application/json"


class WebhookServer(WebServer):
    """Mutating admission webhook that injects the op CLI into opted-in Pods."""

    def __init__(self, config: InjectorConfig):
        self.injector = SecretInjector(config)
        super().__init__(config)

    def _setup_routes(self):
        """Setup web routes."""
        self.app.add_api_route("/mutate", self.mutate, methods=["POST"])
        self.app.add_api_route(
            "/health",
            self.health,
            methods=["GET"],
            response_model=HealthResponse,
            summary="Health check",
        )

    async def mutate(self, request: Request) -> Response:
        body = await request.body()
        if not body:
            logger.error("empty body")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="empty body")

        content_type = request.headers.get("content-type", "")
        if content_type.split(";", 1)[0].strip().lower() != JSON_CONTENT_TYPE:
            logger.error(f"Content-Type={content_type}, expect {JSON_CONTENT_TYPE}")
            raise HTTPException(
                status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
                detail=f"invalid Content-Type, expect `{JSON_CONTENT_TYPE}`",
            )

        try:
            reply = handle_review(self.injector, body)
        except EncodeError as e:
            logger.error(f"Can't encode response: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"could not encode response: {e}",
            )

        return Response(content=reply, media_type=JSON_CONTENT_TYPE)

    async def health(self) -> HealthResponse:
        return HealthResponse(status="healthy", service="secret-injector")


def run():
    """Main entry point."""
    try:
        # Load configuration using Pydantic
        config = InjectorConfig()

        configure_logging(config.debug)
        if config.debug:
            logger.debug("Debug mode enabled")
            logger.debug(f"Configuration: {config.export_json()}")

        # Validate required TLS configuration
        if not config.tls_cert_path or not config.tls_key_path:
            logger.warning("TLS certificates not configured, running in insecure mode")

        # Create and run server
        server = WebhookServer(config)
        server.run()

    except Exception as e:
        logger.exception(f"Failed to start secret injector webhook: {e}")
        raise


if __name__ == "__main__":
    run()
