"""
HTTP API server.

aiohttp application exposing the health check, the authenticated
payout trigger for external schedulers and the NOWPayments IPN
webhook.
"""

import asyncio
import hmac
import json

from aiohttp import web
from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config.settings import settings
from app.services.deposit_service import DepositService
from app.tasks.stake_payout_task import run_stake_payouts
from app.utils.signatures import verify_ipn_signature

SESSION_MAKER = web.AppKey("session_maker", async_sessionmaker)
CRON_SECRET = web.AppKey("cron_secret", str)
IPN_SECRET = web.AppKey("ipn_secret", str)

SIGNATURE_HEADER = "x-nowpayments-sig"


def _is_authorized(request: web.Request) -> bool:
    secret = request.app[CRON_SECRET]
    if not secret:
        return False
    auth = request.headers.get("Authorization", "")
    return hmac.compare_digest(auth, f"Bearer {secret}")


async def health_handler(request: web.Request) -> web.Response:
    """
    Handle /health requests.

    Returns:
        200 when the database answers, 503 otherwise
    """
    try:
        async with request.app[SESSION_MAKER]() as session:
            await session.execute(text("SELECT 1"))
        return web.json_response({"status": "healthy", "database": "ok"})

    except Exception as e:
        logger.error(f"Health check endpoint error: {e}")
        return web.json_response(
            {"status": "unhealthy", "error": str(e)},
            status=503,
        )


async def process_stakes_handler(request: web.Request) -> web.Response:
    """Run the stake payout processor (bearer CRON_SECRET)."""
    if not _is_authorized(request):
        logger.warning(
            f"Unauthorized payout trigger from {request.remote}"
        )
        return web.json_response({"error": "Unauthorized."}, status=401)

    try:
        result = await run_stake_payouts(request.app[SESSION_MAKER])
    except Exception as e:
        logger.exception(f"Payout trigger failed: {e}")
        return web.json_response(
            {"error": "Internal server error."}, status=500
        )
    return web.json_response(result)


async def deposit_webhook_handler(request: web.Request) -> web.Response:
    """Apply a NOWPayments IPN callback."""
    body = await request.read()
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, ValueError):
        return web.json_response({"error": "Invalid JSON."}, status=400)
    if not isinstance(payload, dict):
        return web.json_response({"error": "Invalid JSON."}, status=400)

    secret = request.app[IPN_SECRET]
    signature = request.headers.get(SIGNATURE_HEADER)
    if not secret or not verify_ipn_signature(payload, signature, secret):
        logger.warning(
            "IPN signature verification failed",
            extra={"payment_id": payload.get("payment_id")},
        )
        return web.json_response({"error": "Invalid signature."}, status=401)

    try:
        async with request.app[SESSION_MAKER]() as session:
            outcome = await DepositService(session).handle_payment_notification(
                payload
            )
    except ValueError as e:
        return web.json_response({"error": str(e)}, status=400)
    except Exception as e:
        logger.exception(f"IPN processing failed: {e}")
        return web.json_response(
            {"error": "Internal server error."}, status=500
        )

    if outcome == "not_found":
        return web.json_response({"error": "Deposit not found."}, status=404)

    logger.info(
        f"IPN processed: {outcome}",
        extra={
            "order_id": payload.get("order_id"),
            "payment_id": payload.get("payment_id"),
            "payment_status": payload.get("payment_status"),
        },
    )
    return web.json_response({"success": True, "status": outcome})


def create_app(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    cron_secret: str | None = None,
    ipn_secret: str | None = None,
) -> web.Application:
    """
    Create aiohttp application.

    Args:
        session_maker: Session factory (defaults to the app factory)
        cron_secret: Payout trigger secret (defaults to settings)
        ipn_secret: NOWPayments IPN secret (defaults to settings)

    Returns:
        aiohttp Application instance
    """
    if session_maker is None:
        from app.config.database import async_session_maker

        session_maker = async_session_maker

    app = web.Application()
    app[SESSION_MAKER] = session_maker
    app[CRON_SECRET] = cron_secret or settings.cron_secret or ""
    app[IPN_SECRET] = ipn_secret or settings.nowpayments_ipn_secret or ""

    app.router.add_get("/health", health_handler)
    app.router.add_post("/api/cron/process-stakes", process_stakes_handler)
    app.router.add_get("/api/cron/process-stakes", process_stakes_handler)
    app.router.add_post("/api/deposit/webhook", deposit_webhook_handler)
    return app


async def run_http_server(
    host: str | None = None, port: int | None = None
) -> None:
    """
    Run HTTP API server until cancelled.

    Args:
        host: Host to bind to (default: settings.http_host)
        port: Port to bind to (default: settings.http_port)
    """
    host = host or settings.http_host
    port = port or settings.http_port

    app = create_app()
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"HTTP API server running on {host}:{port}")

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


def main() -> None:
    """Console entry point."""
    from app.config.logging import setup_logging

    setup_logging("http")
    try:
        asyncio.run(run_http_server())
    except KeyboardInterrupt:
        logger.info("HTTP API server stopped")


if __name__ == "__main__":
    main()
