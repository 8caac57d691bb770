"""
Docker volume plugin protocol endpoints.

Docker POSTs a JSON body to each /VolumeDriver.* path and reads back a JSON
body whose "Err" field is empty on success. Failures are reported with HTTP
500 and the error message in "Err".
"""

import json
import logging
from typing import Type

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..core.exceptions import MalformedRequestError, VolumeDriverError
from ..dependencies import get_volume_driver
from ..models import (
    ActivateResponse,
    Capabilities,
    CapabilitiesResponse,
    GetResponse,
    ListResponse,
    MountResponse,
    VolumeRequest,
    VolumeResponse,
)
from ..services.volume_driver import VolumeDriverService

PLUGIN_CONTENT_TYPE = "application/vnd.docker.plugins.v1.1+json"

router = APIRouter(tags=["volume-driver"])


class PluginJSONResponse(JSONResponse):
    media_type = PLUGIN_CONTENT_TYPE


def _respond(body: VolumeResponse, status_code: int = status.HTTP_200_OK) -> PluginJSONResponse:
    return PluginJSONResponse(
        content=body.model_dump(mode="json", by_alias=True), status_code=status_code
    )


def _error(response_type: Type[VolumeResponse], error: VolumeDriverError) -> PluginJSONResponse:
    return _respond(
        response_type(err=str(error)),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def _decode_request(request: Request) -> VolumeRequest:
    """Parse the plugin request body. Docker sends an empty body for some calls."""
    raw = await request.body()
    if not raw.strip():
        return VolumeRequest()
    try:
        payload = json.loads(raw)
        return VolumeRequest.model_validate(payload or {})
    except (ValueError, ValidationError) as e:
        logging.warning(f"API: Malformed plugin request on {request.url.path}: {e}")
        raise MalformedRequestError(str(e)) from e


@router.post("/Plugin.Activate")
async def activate() -> PluginJSONResponse:
    return PluginJSONResponse(content=ActivateResponse().model_dump(by_alias=True))


@router.post("/VolumeDriver.Create")
async def create_volume(
    request: Request, driver: VolumeDriverService = Depends(get_volume_driver)
) -> PluginJSONResponse:
    try:
        req = await _decode_request(request)
        await driver.create(req.name, req.options)
    except VolumeDriverError as e:
        return _error(VolumeResponse, e)
    return _respond(VolumeResponse())


@router.post("/VolumeDriver.Remove")
async def remove_volume(
    request: Request, driver: VolumeDriverService = Depends(get_volume_driver)
) -> PluginJSONResponse:
    try:
        req = await _decode_request(request)
        await driver.remove(req.name)
    except VolumeDriverError as e:
        return _error(VolumeResponse, e)
    return _respond(VolumeResponse())


@router.post("/VolumeDriver.Path")
async def volume_path(
    request: Request, driver: VolumeDriverService = Depends(get_volume_driver)
) -> PluginJSONResponse:
    try:
        req = await _decode_request(request)
        path = await driver.path(req.name)
    except VolumeDriverError as e:
        return _error(MountResponse, e)
    return _respond(MountResponse(mountpoint=path))


@router.post("/VolumeDriver.Mount")
async def mount_volume(
    request: Request, driver: VolumeDriverService = Depends(get_volume_driver)
) -> PluginJSONResponse:
    try:
        req = await _decode_request(request)
        path = await driver.mount(req.name)
    except VolumeDriverError as e:
        return _error(MountResponse, e)
    return _respond(MountResponse(mountpoint=path))


@router.post("/VolumeDriver.Unmount")
async def unmount_volume(
    request: Request, driver: VolumeDriverService = Depends(get_volume_driver)
) -> PluginJSONResponse:
    try:
        req = await _decode_request(request)
        await driver.unmount(req.name)
    except VolumeDriverError as e:
        return _error(VolumeResponse, e)
    return _respond(VolumeResponse())


@router.post("/VolumeDriver.Get")
async def get_volume(
    request: Request, driver: VolumeDriverService = Depends(get_volume_driver)
) -> PluginJSONResponse:
    try:
        req = await _decode_request(request)
        entry = await driver.get(req.name)
    except VolumeDriverError as e:
        return _error(GetResponse, e)
    return _respond(GetResponse(volume=entry))


@router.post("/VolumeDriver.List")
async def list_volumes(
    driver: VolumeDriverService = Depends(get_volume_driver),
) -> PluginJSONResponse:
    try:
        volumes = await driver.list()
    except VolumeDriverError as e:
        return _error(ListResponse, e)
    return _respond(ListResponse(volumes=volumes))


@router.post("/VolumeDriver.Capabilities")
async def capabilities(
    driver: VolumeDriverService = Depends(get_volume_driver),
) -> PluginJSONResponse:
    body = CapabilitiesResponse(capabilities=Capabilities(scope=driver.capabilities()))
    return PluginJSONResponse(content=body.model_dump(by_alias=True))
