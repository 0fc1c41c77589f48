#!/usr/bin/env python3
"""
imagelab API Server
Stateless HTTP front for the two transforms: every request carries its own
images and parameters and gets back the encoded result.
"""

import os
import json
import logging
from typing import Optional
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.utils import secure_filename

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

from imagelab.errors import (
    ImageLabError,
    InternalProcessingFailure,
    InvalidInput,
    InvalidParameter,
    ResourceAllocationFailure,
)
from imagelab.models.filter_catalog import describe_catalog
from imagelab.models.filter_request import FilterRequest
from imagelab.models.operation_request import OperationRequest
from imagelab.models.raster_buffer import RasterBuffer
from imagelab.models.transform_result import TransformResult
from imagelab.pipeline.dual_image_pipeline import apply_dual_op
from imagelab.pipeline.filter_pipeline import apply_filter
from imagelab.repositories.image_repository import ImageRepository
from imagelab.services.dimension_service import DimensionService

app = Flask(__name__)
CORS(app)  # Enable CORS for frontend communication

# Configuration
ALLOWED_EXTENSIONS = set(os.getenv("ALLOWED_EXTENSIONS", "png,jpg,jpeg,gif,bmp,webp").split(","))
MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_SIZE_MB", "100")) * 1024 * 1024

app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH

# Initialize services
image_repository = ImageRepository()
dimension_service = DimensionService()

logger = logging.getLogger(__name__)


def allowed_file(filename: str) -> bool:
    """Check if file extension is allowed."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def form_flag(name: str) -> bool:
    return request.form.get(name, 'false').strip().lower() in ('1', 'true', 'yes', 'on')


def form_weight(name: str, default: float) -> float:
    raw = request.form.get(name)
    if raw is None or raw == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise InvalidParameter(name, raw, "expected a number") from None


def read_upload(field: str) -> RasterBuffer:
    """Decode one multipart upload into a RasterBuffer."""
    if field not in request.files:
        raise InvalidInput(f"No {field} provided")

    file = request.files[field]
    filename = secure_filename(file.filename or '')
    if filename == '':
        raise InvalidInput(f"No file selected for {field}")
    if not allowed_file(filename):
        raise InvalidInput(f"File type not allowed: {filename}")

    image = image_repository.decode(file.read(), source=filename)
    logger.info(f"{field} decoded: {image.width}x{image.height}x{image.channels}")
    return image


def result_payload(result: TransformResult) -> dict:
    return {
        'success': True,
        'result': result.encoded.to_data_url(),
        'width': result.buffer.width,
        'height': result.buffer.height,
        'channels': result.buffer.channels,
    }


def error_response(err: ImageLabError):
    """Caller mistakes are 4xx, processing failures are 5xx."""
    status = 500 if isinstance(err, (ResourceAllocationFailure, InternalProcessingFailure)) else 400
    body = {'success': False, 'error': type(err).__name__, 'message': str(err)}
    if isinstance(err, InvalidParameter):
        body['parameter'] = err.name
        body['value'] = err.value if isinstance(err.value, (int, float, str, bool)) else repr(err.value)
    if status == 500:
        logger.error(f"Transform failed: {err}")
    return jsonify(body), status


@app.errorhandler(ImageLabError)
def handle_imagelab_error(err: ImageLabError):
    return error_response(err)


@app.route('/api/filters', methods=['GET'])
def list_filters():
    """Filter catalog with the parameter controls each filter exposes."""
    return jsonify({'filters': describe_catalog()})


@app.route('/api/operations', methods=['POST'])
def run_operation():
    """Combine image_a and image_b with the selected operation."""
    image_a = read_upload('image_a')
    image_b = read_upload('image_b')

    op_request = OperationRequest(
        kind=request.form.get('operation', 'add'),
        grayscale_requested=form_flag('grayscale'),
        alpha=form_weight('alpha', 0.5),
        beta=form_weight('beta', 0.5),
    )
    result = apply_dual_op(image_a, image_b, op_request)
    return jsonify(result_payload(result))


@app.route('/api/filters/apply', methods=['POST'])
def run_filter():
    """Apply one catalog filter to image."""
    image = read_upload('image')

    raw_params = request.form.get('parameters') or '{}'
    try:
        parameters: Optional[dict] = json.loads(raw_params)
    except ValueError:
        raise InvalidParameter('parameters', raw_params, "expected a JSON object") from None
    if not isinstance(parameters, dict):
        raise InvalidParameter('parameters', raw_params, "expected a JSON object")

    filter_request = FilterRequest(
        filter_name=request.form.get('filter', 'noFilter'),
        parameters=parameters,
        grayscale_requested=form_flag('grayscale'),
    )
    result = apply_filter(image, filter_request)
    return jsonify(result_payload(result))


@app.route('/api/optimal-crop', methods=['POST'])
def optimal_crop():
    """Largest origin-anchored crop both images share, in percent of each."""
    image_a = read_upload('image_a')
    image_b = read_upload('image_b')

    crop_a, crop_b = dimension_service.optimal_crop_size(image_a, image_b)
    return jsonify({'success': True, 'crop_a': crop_a.as_dict(), 'crop_b': crop_b.as_dict()})


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'message': 'imagelab API is running',
    })


@app.errorhandler(413)
def too_large(e):
    """Handle file too large error."""
    return jsonify({'error': f'File too large. Maximum size is {MAX_CONTENT_LENGTH // (1024 * 1024)}MB.'}), 413


@app.errorhandler(500)
def internal_error(e):
    """Handle internal server error."""
    logger.error(f"Internal server error: {e}")
    return jsonify({'error': 'Internal server error'}), 500


if __name__ == '__main__':
    print("Starting imagelab API Server...")
    print(f"Max upload size: {MAX_CONTENT_LENGTH // (1024 * 1024)}MB")
    print("Endpoints:")
    print("   GET  /api/health")
    print("   GET  /api/filters")
    print("   POST /api/operations")
    print("   POST /api/filters/apply")
    print("   POST /api/optimal-crop")
    print("=" * 60)

    app.run(host=os.getenv("API_HOST", "0.0.0.0"), port=int(os.getenv("API_PORT", "5002")))
