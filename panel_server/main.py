"""
Lighting Panel Server
Main FastAPI application: a thin authenticated proxy in front of the Govee
cloud API plus the static single-page control panel.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse
from pydantic import ValidationError

from . import capabilities
from .auth import SessionGate
from .config import settings
from .errors import AuthenticationError, ConfigurationError, InvalidRequestError, PanelError
from .integration import GoveeClient, VendorClient
from .integration import variants
from .memory import SessionStore
from .models import CapabilityCommand, DeviceRef, LoginRequest

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.FileHandler(settings.log_file), logging.StreamHandler()]
    if settings.log_file
    else [logging.StreamHandler()],
)
logger = logging.getLogger(__name__)

# Paths reachable without a session when the gate is enabled
PUBLIC_PATHS = {"/healthz", "/login.html", "/api/login"}
LOGIN_PAGE = "/login.html"

# Global component instances
vendor_client: Optional[VendorClient] = None
session_store: Optional[SessionStore] = None
session_gate: Optional[SessionGate] = None


def get_vendor_client() -> VendorClient:
    """
    Return the vendor client, creating it on first use.

    Raises:
        ConfigurationError: If no vendor API key is configured
    """
    global vendor_client
    if not settings.govee_api_key:
        raise ConfigurationError("Missing GOVEE_API_KEY env var on server")
    if vendor_client is None:
        vendor_client = GoveeClient(settings.govee_api_key)
    return vendor_client


def get_session_gate() -> SessionGate:
    """Return the session gate, creating it (and its store) on first use."""
    global session_store, session_gate
    if session_gate is None:
        if session_store is None:
            session_store = SessionStore()
        session_gate = SessionGate(
            store=session_store,
            secret=settings.session_secret,
            username=settings.admin_username,
            password=settings.admin_password,
            timeout_minutes=settings.session_timeout_minutes,
        )
    return session_gate


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    # Startup
    logger.info("Starting panel server...")

    if settings.govee_api_key:
        get_vendor_client()
        logger.info(f"Vendor client ready for {settings.govee_api_base}")
    else:
        logger.error("GOVEE_API_KEY is not set; upstream routes will answer 500")

    get_session_gate()
    if settings.auth_enabled and not settings.admin_password:
        logger.warning("Session gate enabled but ADMIN_PASSWORD is not set; nobody can log in")
    if settings.auth_enabled and settings.session_secret == "change-me":
        logger.warning("SESSION_SECRET is the default value; set it for any shared deployment")

    if settings.color_encoding not in capabilities.COLOR_ENCODINGS:
        logger.error(f"Unknown COLOR_ENCODING {settings.color_encoding!r}; color requests will fail")

    yield

    # Shutdown
    logger.info("Shutting down panel server...")
    if vendor_client:
        await vendor_client.close()


# Create FastAPI app
app = FastAPI(
    title="Lighting Panel",
    description="Authenticated proxy for Govee cloud lighting control",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(PanelError)
async def panel_error_handler(request: Request, exc: PanelError):
    """Render local errors as {"ok": false, "error": ...}."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.middleware("http")
async def session_gate_middleware(request: Request, call_next):
    """Require an authenticated session for everything except public paths."""
    path = request.url.path
    if not settings.auth_enabled or path in PUBLIC_PATHS or request.method == "OPTIONS":
        return await call_next(request)

    if get_session_gate().is_authenticated(request.cookies.get(settings.session_cookie_name)):
        return await call_next(request)

    if path.startswith("/api/"):
        return JSONResponse(status_code=401, content=AuthenticationError("Not authenticated").to_dict())
    return RedirectResponse(LOGIN_PAGE, status_code=303)


# Add CORS middleware (wraps the session gate)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def _read_json(request: Request) -> Dict[str, Any]:
    """Request body as a dict; malformed or non-object bodies read as empty."""
    try:
        data = await request.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _device_ref(data: Dict[str, Any], extra: str = "") -> DeviceRef:
    """Build a DeviceRef from request data, naming the missing fields on failure."""
    device = data.get("device")
    sku = data.get("sku")
    if not isinstance(device, str) or not device or not isinstance(sku, str) or not sku:
        raise InvalidRequestError(f"Missing device, sku or {extra}" if extra else "Missing device or sku")
    return DeviceRef(device=device, sku=sku)


async def _control(device_ref: DeviceRef, capability: CapabilityCommand, client: VendorClient) -> JSONResponse:
    """Send a capability through the payload fallback and relay the outcome."""
    outcome = await variants.send_control(client, device_ref, capability)
    return JSONResponse(
        status_code=outcome.response.status,
        content=outcome.to_body(include_first_attempt=settings.include_first_attempt),
    )


@app.get("/healthz")
async def health_check():
    """Health check endpoint."""
    return {"ok": True}


# Session endpoints

@app.post("/api/login")
async def login(request: Request):
    """Exchange the operator credentials for a session cookie."""
    data = await _read_json(request)
    try:
        creds = LoginRequest.model_validate(data)
    except ValidationError:
        raise AuthenticationError("Invalid username or password")

    cookie_value = get_session_gate().login(creds.username, creds.password)
    response = JSONResponse(content={"ok": True})
    response.set_cookie(
        settings.session_cookie_name,
        cookie_value,
        max_age=settings.session_timeout_minutes * 60,
        httponly=True,
        samesite="lax",
    )
    return response


@app.post("/api/logout")
async def logout(request: Request):
    """Destroy the current session."""
    get_session_gate().logout(request.cookies.get(settings.session_cookie_name))
    response = JSONResponse(content={"ok": True})
    response.delete_cookie(settings.session_cookie_name)
    return response


# Device endpoints

@app.get("/api/devices")
async def list_devices():
    """List all devices on the vendor account."""
    client = get_vendor_client()
    result = await client.list_devices()
    return JSONResponse(status_code=result.status, content=result.body)


@app.get("/api/state")
async def device_state(device: Optional[str] = None, sku: Optional[str] = None):
    """Fetch a device's state, probing both payload shapes if needed."""
    client = get_vendor_client()
    device_ref = _device_ref({"device": device, "sku": sku})
    outcome = await variants.fetch_state(client, device_ref)
    return JSONResponse(
        status_code=outcome.response.status,
        content=outcome.to_body(include_first_attempt=settings.include_first_attempt),
    )


@app.post("/api/power")
async def set_power(request: Request):
    """Turn a device on or off."""
    client = get_vendor_client()
    data = await _read_json(request)
    device_ref = _device_ref(data, "on(boolean)")
    return await _control(device_ref, capabilities.power(data.get("on")), client)


@app.post("/api/brightness")
async def set_brightness(request: Request):
    """Set brightness (1-100)."""
    client = get_vendor_client()
    data = await _read_json(request)
    device_ref = _device_ref(data, "value(number)")
    return await _control(device_ref, capabilities.brightness(data.get("value")), client)


@app.post("/api/color")
async def set_color(request: Request):
    """Set an RGB color."""
    client = get_vendor_client()
    data = await _read_json(request)
    device_ref = _device_ref(data, "r,g,b numbers")
    capability = capabilities.color(
        data.get("r"), data.get("g"), data.get("b"), encoding=settings.color_encoding
    )
    return await _control(device_ref, capability, client)


@app.post("/api/colortemp")
async def set_color_temperature(request: Request):
    """Set color temperature in Kelvin."""
    client = get_vendor_client()
    data = await _read_json(request)
    device_ref = _device_ref(data, "kelvin(number)")
    return await _control(device_ref, capabilities.color_temperature(data.get("kelvin")), client)


@app.post("/api/scene")
async def set_scene(request: Request):
    """Activate a preset scene, or a DIY scene with type "diy"."""
    client = get_vendor_client()
    data = await _read_json(request)
    device_ref = _device_ref(data, "value")
    return await _control(device_ref, capabilities.scene(data.get("value"), data.get("type")), client)


@app.get("/api/debug/upstream-state-get")
async def debug_upstream_state_get(device: str = "", sku: str = ""):
    """
    Raw GET of the vendor state endpoint.

    Only available with DEBUG_ROUTES=true. Always answers 200 and reports
    the upstream status, headers, body and full request URL as data.
    """
    if not settings.debug_routes:
        raise HTTPException(status_code=404, detail="Not Found")
    client = get_vendor_client()
    if not isinstance(client, GoveeClient):
        raise HTTPException(status_code=404, detail="Not Found")

    result = await client.fetch_state_get(DeviceRef(device=device, sku=sku))
    return {
        "status": result.status,
        "headers": result.headers,
        "body": result.body,
        "url": result.url,
    }


# Static single-page app

@app.get("/{path:path}")
async def spa_shell(path: str):
    """Serve static assets, falling back to the app shell for client-side routes."""
    if path == "api" or path.startswith("api/"):
        raise HTTPException(status_code=404, detail="Not Found")

    static_root = Path(settings.static_dir).resolve()
    if path:
        candidate = (static_root / path).resolve()
        if candidate.is_file() and static_root in candidate.parents:
            return FileResponse(candidate)

    index = static_root / "index.html"
    if not index.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(index)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "panel_server.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
