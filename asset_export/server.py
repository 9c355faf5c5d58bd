"""
HTTP endpoints for asset export, listing and deletion.
"""

import json
import logging
import os
from datetime import datetime
from functools import lru_cache, wraps

from bottle import Bottle, HTTPResponse, request, response

from .asset_db import AssetDb
from .db_config import DbConfig
from .exceptions import AssetExportError, ExportFailedError, InvalidRequestError, NotFoundError
from .export_request import CropArea, ExportRequest
from .export_service import AssetExportService
from .export_settings import ExportSettings
from .exported_asset import TIME_FORMAT
from .storage_factory import storage_client_from_env

app = application = Bottle()

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_export_service() -> AssetExportService:
    """Build the service from environment configuration on first use."""
    settings = ExportSettings.from_env()
    logging.basicConfig(
        level=logging.getLevelName(settings.log_level.upper()),
        format='%(asctime)s [%(levelname)s] %(message)s'
    )
    return AssetExportService.from_settings(
        storage=storage_client_from_env(logger),
        asset_db=AssetDb(DbConfig.from_env(), logger),
        settings=settings,
        logger=logger,
    )


def json_datetime_handler(x):
    if isinstance(x, datetime):
        return x.strftime(TIME_FORMAT)
    raise TypeError("Unknown type")


def json_response(payload, status=200):
    response.status = status
    response.content_type = 'application/json'
    return json.dumps(payload, default=json_datetime_handler)


def allow_cross_origin(func):
    """Decorate a view function to allow cross domain access."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            result = func(*args, **kwargs)
        except HTTPResponse as r:
            r.set_header('Access-Control-Allow-Origin', '*')
            raise
        response.set_header('Access-Control-Allow-Origin', '*')
        return result
    return wrapper


def json_errors(func):
    """Decorate a view function to map export errors onto JSON error responses."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except InvalidRequestError as e:
            return json_response({'error': str(e)}, 400)
        except NotFoundError as e:
            return json_response({'error': str(e)}, 404)
        except ExportFailedError as e:
            status = 400 if isinstance(e.cause, InvalidRequestError) else 500
            logger.error(f"Asset export error: {e}")
            return json_response({'error': str(e)}, status)
        except AssetExportError as e:
            logger.error(f"Asset request error: {e}")
            return json_response({'error': str(e)}, 500)
    return wrapper


def request_payload() -> dict:
    """JSON body, falling back to form fields."""
    try:
        payload = request.json
    except (ValueError, HTTPResponse):
        raise InvalidRequestError("Request body is not valid JSON")
    if payload is None:
        payload = dict(request.forms)
    if not isinstance(payload, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    return payload


def batch_arguments(data: dict) -> dict:
    """Keyword arguments for AssetExportService.batch_export from a payload."""
    crop = data.get('cropArea', data.get('crop_area'))
    formats = data.get('formats')
    scales = data.get('scales')
    if not isinstance(formats, list) or not isinstance(scales, list):
        raise InvalidRequestError("formats and scales must be lists")
    return {
        'design_file_id': data.get('designFileId', data.get('design_file_id')),
        'source_image_url': data.get('imageUrl', data.get('source_image_url')),
        'base_name': data.get('baseName', data.get('base_name')),
        'formats': formats,
        'scales': scales,
        'quality': data.get('quality'),
        'crop_area': CropArea.from_dict(crop) if crop is not None else None,
        'created_by': data.get('createdBy', data.get('created_by')),
    }


@app.route('/export', method='OPTIONS')
@allow_cross_origin
def export_options():
    response.set_header('Access-Control-Allow-Methods', 'GET, POST, DELETE, OPTIONS')
    response.set_header('Access-Control-Allow-Headers', 'Content-Type')
    return ''


@app.route('/export', method='POST')
@allow_cross_origin
@json_errors
def export():
    """Export a single asset, or a batch with ?mode=batch."""
    data = request_payload()
    service = get_export_service()

    if request.query.get('mode', 'single') == 'batch':
        kwargs = batch_arguments(data)
        if not kwargs['design_file_id'] or not kwargs['source_image_url']:
            raise InvalidRequestError("designFileId and imageUrl are required")
        result = service.batch_export(**kwargs)
        return json_response({'success': True, 'data': result.to_dict()})

    asset = service.export_asset(ExportRequest.from_dict(data))
    return json_response({'success': True, 'data': asset.to_dict()})


@app.route('/export', method='GET')
@allow_cross_origin
@json_errors
def list_assets():
    """List assets by ?designFileId= or ?projectId=, newest first."""
    design_file_id = request.query.get('designFileId')
    project_id = request.query.get('projectId')
    service = get_export_service()

    if design_file_id:
        assets = service.get_exported_assets(design_file_id)
    elif project_id:
        assets = service.get_project_assets(project_id)
    else:
        raise InvalidRequestError("designFileId or projectId is required")

    return json_response({'success': True, 'data': [asset.to_dict() for asset in assets]})


@app.route('/export', method='DELETE')
@allow_cross_origin
@json_errors
def delete_asset():
    """Delete the asset given by ?assetId=."""
    asset_id = request.query.get('assetId')
    if not asset_id:
        raise InvalidRequestError("assetId is required")
    get_export_service().delete_exported_asset(asset_id)
    return json_response({'success': True, 'message': 'Asset deleted successfully'})


@app.route('/export/download', method='POST')
@allow_cross_origin
@json_errors
def download_assets():
    """Return the requested assets as a zip archive."""
    asset_ids = request_payload().get('assetIds')
    if not isinstance(asset_ids, list) or not asset_ids:
        raise InvalidRequestError("assetIds must be a non-empty list")
    data = get_export_service().download_assets_as_zip(asset_ids)
    response.content_type = 'application/zip'
    response.set_header('Content-Disposition', 'attachment; filename="exported-assets.zip"')
    return data


@app.route('/')
def main_page():
    return 'Design asset export server'


if __name__ == '__main__':
    from bottle import run

    run(app=application,
        host='0.0.0.0',
        port=int(os.getenv('PORT', '8080')),
        debug=os.getenv('DEBUG_APP', '').lower() in ('1', 'true'))
