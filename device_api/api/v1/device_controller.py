# Standard library imports
import logging
from typing import List, Optional

# External package imports
from fastapi import APIRouter, Header, HTTPException, Query, Request, Response, status

# Local application imports
from ...application.dto.device_dto import (
    DeviceCreateRequest,
    DeviceResponse,
    DeviceResponseList,
    DeviceUpdateRequest,
    ErrorResponse,
)
from ...application.services.device_mutation_service import DeviceMutationService
from ...application.services.device_query_service import DeviceQueryService
from ...domain.models.device import Device, DeviceState
from ...domain.results import ResultHandler
from ...di.container import get_container
from .error_handlers import failure_response

logger = logging.getLogger(__name__)

DEVICES_PATH = "/api/v1/devices"

router = APIRouter(tags=["devices"])

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}


def parse_if_match(if_match: Optional[str]) -> Optional[int]:
    """
    Read the caller-observed version from an If-Match header.

    Accepts 3, "3" and W/"3". Returns None when the header is absent or
    is "*", which matches any current version.
    """
    if if_match is None:
        return None
    value = if_match.strip()
    if value == "*":
        return None
    if value.startswith("W/"):
        value = value[2:]
    value = value.strip('"')
    try:
        version = int(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"If-Match must carry a device version, got '{if_match}'",
        )
    if version < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="If-Match version cannot be negative",
        )
    return version


def _with_etag(response: Response, device: Device) -> DeviceResponse:
    response.headers["ETag"] = f'"{device.version}"'
    return DeviceResponse.from_device(device)


@router.post(
    "",
    response_model=DeviceResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_device(
    request: DeviceCreateRequest,
    response: Response,
) -> DeviceResponse:
    """
    Create a new device

    Returns:
        DeviceResponse with the generated ID, version 0 and creation time
    """
    logger.info(
        f"POST {DEVICES_PATH} - createDevice called with payload: "
        f"name='{request.name}', brand='{request.brand}', state='{request.state.value}'"
    )
    mutation_service = get_container().get(DeviceMutationService)

    result = await mutation_service.create(
        name=request.name,
        brand=request.brand,
        state=request.state,
    )
    device = result.value
    logger.info(f"Device created successfully with id: {device.id}")

    response.headers["Location"] = f"{DEVICES_PATH}/{device.id}"
    return _with_etag(response, device)


@router.get("", response_model=DeviceResponseList)
async def list_devices() -> DeviceResponseList:
    """List all devices"""
    logger.info(f"GET {DEVICES_PATH} - getAllDevices called")
    query_service = get_container().get(DeviceQueryService)

    devices = await query_service.get_all()
    return DeviceResponseList(devices=[DeviceResponse.from_device(device) for device in devices])


@router.get("/search/by-brand", response_model=List[DeviceResponse], responses=ERROR_RESPONSES)
async def search_devices_by_brand(
    brand: str = Query(min_length=1, max_length=50),
) -> List[DeviceResponse]:
    """Devices whose brand matches exactly (case-sensitive)"""
    logger.info(f"GET {DEVICES_PATH}/search/by-brand - getDevicesByBrand called with brand='{brand}'")
    query_service = get_container().get(DeviceQueryService)

    devices = await query_service.get_by_brand(brand)
    return [DeviceResponse.from_device(device) for device in devices]


@router.get("/search/by-state", response_model=List[DeviceResponse], responses=ERROR_RESPONSES)
async def search_devices_by_state(
    state: DeviceState = Query(),
) -> List[DeviceResponse]:
    """Devices currently in the given state"""
    logger.info(f"GET {DEVICES_PATH}/search/by-state - getDevicesByState called with state='{state.value}'")
    query_service = get_container().get(DeviceQueryService)

    devices = await query_service.get_by_state(state)
    return [DeviceResponse.from_device(device) for device in devices]


@router.get("/{device_id}", response_model=DeviceResponse, responses=ERROR_RESPONSES)
async def get_device(
    device_id: str,
    http_request: Request,
    response: Response,
):
    """Get a device by ID"""
    logger.info(f"GET {DEVICES_PATH}/{device_id} - getDeviceById called")
    query_service = get_container().get(DeviceQueryService)

    result = await query_service.get_by_id(device_id)
    if ResultHandler.is_failure(result):
        return failure_response(http_request, result.error)
    return _with_etag(response, result.value)


@router.put("/{device_id}", response_model=DeviceResponse, responses=ERROR_RESPONSES)
@router.patch("/{device_id}", response_model=DeviceResponse, responses=ERROR_RESPONSES)
async def update_device(
    device_id: str,
    request: DeviceUpdateRequest,
    http_request: Request,
    response: Response,
    if_match: Optional[str] = Header(default=None),
):
    """
    Update a device. Fields left out (or null) keep their current value.

    name and brand cannot change while the device is IN_USE; state always can.
    """
    logger.info(f"{http_request.method} {DEVICES_PATH}/{device_id} - updateDevice called with payload: {request}")
    expected_version = parse_if_match(if_match)
    mutation_service = get_container().get(DeviceMutationService)

    result = await mutation_service.update(
        device_id,
        request.to_changes(),
        expected_version=expected_version,
    )
    if ResultHandler.is_failure(result):
        return failure_response(http_request, result.error)
    return _with_etag(response, result.value)


@router.delete(
    "/{device_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=ERROR_RESPONSES,
)
async def delete_device(
    device_id: str,
    http_request: Request,
    if_match: Optional[str] = Header(default=None),
) -> Response:
    """Delete a device. Devices in use cannot be deleted."""
    logger.info(f"DELETE {DEVICES_PATH}/{device_id} - deleteDevice called")
    expected_version = parse_if_match(if_match)
    mutation_service = get_container().get(DeviceMutationService)

    result = await mutation_service.delete(device_id, expected_version=expected_version)
    if ResultHandler.is_failure(result):
        return failure_response(http_request, result.error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
