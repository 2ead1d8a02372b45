"""
API handlers for the energy load forecasting pipeline.
Framework-independent request handling for upload, prediction and retrieval.
"""

import json
import numbers
import logging
from abc import ABC, abstractmethod
from typing import Dict, Tuple, Any, Optional, Union

from data.ingestion import parse_csv, detect_columns
from data.preprocessing import (
    standardize_data, fill_missing_values, get_dataset_info, preview_points
)
from data.storage import ForecastStore, InMemoryForecastStore
from features.feature_engineer import LoadFeatureEngineer
from model.forecasting_interface import ForecastingInterface
from models.data_models import ModelType, VALID_HORIZONS
from utils.config import Config
from utils.exceptions import (
    DataValidationError, NoDataAvailableError, InsufficientDataError
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


Response = Tuple[int, Dict[str, Any]]


class APIHandler(ABC):
    """Abstract base class for API handling."""

    @abstractmethod
    def validate_request(self, request: Dict[str, Any]) -> Tuple[bool, str]:
        """Validate incoming API request."""
        pass

    @abstractmethod
    def process_forecast_request(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Process forecast generation request."""
        pass

    @abstractmethod
    def format_response(self, data: Any, format_type: str) -> Any:
        """Format response data in specified format."""
        pass

    @abstractmethod
    def handle_error(self, error_code: int, error_message: str) -> Dict[str, Any]:
        """Handle and format error responses."""
        pass


def _parse_horizon(value: Any) -> Optional[int]:
    """Coerce a request horizon to int, or None if it is not a whole number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


class ForecastAPIHandler(APIHandler):
    """
    Handles the upload/predict/retrieve workflow.

    Each handle_* method returns a (status_code, payload) tuple whose payload
    is JSON-serializable. Input and precondition errors map to 400, missing
    resources to 404 and anything else to 500.
    """

    NO_DATA_MESSAGE = 'No data available. Please upload data first.'

    def __init__(self,
                 store: Optional[ForecastStore] = None,
                 feature_engineer: Optional[LoadFeatureEngineer] = None,
                 forecasting: Optional[ForecastingInterface] = None,
                 preview_rows: Optional[int] = None):
        """
        Initialize the handler.

        Args:
            store: Storage backend (a fresh in-memory store if None)
            feature_engineer: Feature engineer applied on upload
            forecasting: Interface used to run models
            preview_rows: Number of points returned as upload preview
        """
        self.store = store or InMemoryForecastStore()
        self.feature_engineer = feature_engineer or LoadFeatureEngineer(
            holiday_country=Config.HOLIDAY_COUNTRY
        )
        self.forecasting = forecasting or ForecastingInterface(train_ratio=Config.TRAIN_RATIO)
        self.preview_rows = preview_rows or Config.PREVIEW_ROWS

    def handle_upload(self,
                      content: Optional[Union[bytes, str]],
                      filename: str,
                      session_id: Optional[str] = None) -> Response:
        """
        Run the preprocessing pipeline on an uploaded CSV file.

        Args:
            content: Raw file content
            filename: Original file name
            session_id: Session to store the dataset under

        Returns:
            (status, payload) with datasetInfo and a preview on success
        """
        session_id = session_id or Config.DEFAULT_SESSION_ID

        if content is None:
            return 400, self.handle_error(400, 'No file uploaded')

        try:
            csv_content = content.decode('utf-8', errors='replace') if isinstance(content, bytes) else content

            raw_rows, columns = parse_csv(csv_content)
            if raw_rows.empty:
                raise DataValidationError('CSV file is empty')

            detected = detect_columns(columns)
            detected.validate()

            standardized = standardize_data(raw_rows, detected)
            if standardized.empty:
                raise DataValidationError('No valid data points found after preprocessing')

            filled = fill_missing_values(standardized)
            if filled['load'].isna().all():
                raise DataValidationError('No numeric load values found after preprocessing')

            self.store.store_time_series(session_id, filled)

            processed = self.feature_engineer.create_features(filled)
            self.store.store_processed_data(session_id, processed)

            dataset_info = get_dataset_info(filled, filename)
            preview = preview_points(filled, self.preview_rows)

            logger.info(f"Upload '{filename}' processed: {dataset_info.row_count} points")
            return 200, {
                'success': True,
                'datasetInfo': dataset_info.to_dict(),
                'preview': [point.to_dict() for point in preview],
            }
        except DataValidationError as e:
            return 400, self.handle_error(400, str(e))
        except Exception as e:
            logger.error(f"Upload error: {e}")
            return 500, self.handle_error(500, str(e) or 'Upload failed')

    def handle_dataset_info(self, session_id: Optional[str] = None) -> Response:
        """Summarize the stored series of a session."""
        snapshot = self.store.get_time_series(session_id or Config.DEFAULT_SESSION_ID)

        if snapshot is None or snapshot.data.empty:
            return 404, {'error': 'No dataset available'}

        dataset_info = get_dataset_info(snapshot.data, 'current_dataset.csv')
        return 200, dataset_info.to_dict()

    def validate_request(self, request: Dict[str, Any]) -> Tuple[bool, str]:
        """
        Validate a single-model prediction request.

        Args:
            request: Request body with 'modelType' and 'horizon'

        Returns:
            Tuple of (is_valid, error_message)
        """
        model_type = request.get('modelType')
        horizon = request.get('horizon')

        if not model_type or not horizon:
            return False, 'Model type and horizon are required'

        if model_type not in [m.value for m in ModelType]:
            available = ', '.join(m.value for m in ModelType)
            return False, f"Unknown model type: {model_type}. Available: {available}"

        return self._validate_horizon(horizon)

    def _validate_horizon(self, horizon: Any) -> Tuple[bool, str]:
        if _parse_horizon(horizon) not in VALID_HORIZONS:
            allowed = ' or '.join(str(h) for h in VALID_HORIZONS)
            return False, f"Horizon must be {allowed} days"
        return True, ''

    def _processed_data(self, session_id: str):
        snapshot = self.store.get_processed_data(session_id)
        if snapshot is None or snapshot.data.empty:
            raise NoDataAvailableError(self.NO_DATA_MESSAGE)
        return snapshot.data

    def process_forecast_request(self,
                                 request: Dict[str, Any],
                                 session_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Run one model on the session's processed data and store the result.

        Args:
            request: Validated request body
            session_id: Session whose data is used

        Returns:
            Serialized ModelResult

        Raises:
            NoDataAvailableError: If nothing has been uploaded yet
        """
        session_id = session_id or Config.DEFAULT_SESSION_ID
        data = self._processed_data(session_id)

        result = self.forecasting.run_model(
            data, ModelType.from_value(request['modelType']), _parse_horizon(request['horizon'])
        )
        self.store.store_model_result(session_id, result)
        return result.to_dict()

    def handle_predict(self,
                       request: Optional[Dict[str, Any]],
                       session_id: Optional[str] = None) -> Response:
        """Handle a single-model prediction request."""
        request = request or {}

        is_valid, message = self.validate_request(request)
        if not is_valid:
            return 400, self.handle_error(400, message)

        try:
            result = self.process_forecast_request(request, session_id)
            return 200, {'success': True, 'result': result}
        except Exception as e:
            return self._error_response(e, 'Prediction failed')

    def handle_predict_all(self,
                           request: Optional[Dict[str, Any]],
                           session_id: Optional[str] = None) -> Response:
        """
        Run every model independently on the session's processed data.
        Results are returned but not stored as the latest forecast.
        """
        request = request or {}
        horizon = request.get('horizon')

        if not horizon:
            return 400, self.handle_error(400, 'Horizon is required')

        is_valid, message = self._validate_horizon(horizon)
        if not is_valid:
            return 400, self.handle_error(400, message)

        try:
            data = self._processed_data(session_id or Config.DEFAULT_SESSION_ID)
            results = self.forecasting.run_all_models(data, _parse_horizon(horizon))
            return 200, {'success': True, 'results': [result.to_dict() for result in results]}
        except Exception as e:
            return self._error_response(e, 'Prediction failed')

    def handle_latest_forecast(self, session_id: Optional[str] = None) -> Response:
        """Return the most recently stored model result."""
        result = self.store.get_latest_model_result(session_id or Config.DEFAULT_SESSION_ID)

        if result is None:
            return 404, {'error': 'No forecast available'}

        return 200, result.to_dict()

    def format_response(self, data: Any, format_type: str = 'dict') -> Any:
        """
        Format response data in specified format.

        Args:
            data: Payload or result object
            format_type: 'dict' or 'json'

        Returns:
            Dictionary or JSON string
        """
        if hasattr(data, 'to_dict'):
            data = data.to_dict()

        if format_type == 'dict':
            return data
        elif format_type == 'json':
            return json.dumps(data, default=str)
        else:
            raise ValueError(f"Unknown format type: {format_type}")

    def handle_error(self, error_code: int, error_message: str) -> Dict[str, Any]:
        """Handle and format error responses."""
        if error_code >= 500:
            logger.error(f"Request failed ({error_code}): {error_message}")
        else:
            logger.warning(f"Request rejected ({error_code}): {error_message}")
        return {'success': False, 'error': error_message}

    def _error_response(self, error: Exception, fallback_message: str) -> Response:
        if isinstance(error, (DataValidationError, NoDataAvailableError, InsufficientDataError)):
            status = 400
        else:
            status = 500
        return status, self.handle_error(status, str(error) or fallback_message)
