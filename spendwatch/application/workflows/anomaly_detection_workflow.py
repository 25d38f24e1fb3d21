"""
Deviation detection workflow orchestrator.
"""

import logging
import warnings
import pandas as pd
from typing import Optional
from ...domain.statistics import DeviationStatistics, summarize_frame
from ...infrastructure.data.readers.base import DataReader
from ...infrastructure.anomaly_detectors.base import AnomalyDetector
from ...infrastructure.data.writers.base import DataWriter

logger = logging.getLogger(__name__)


class DeviationDetectionWorkflow:
    """
    Main orchestrator class for the spend deviation workflow.

    This workflow orchestrates the detection process:
    1. Load performance data (via performance_reader)
    2. Load forecast data (via forecast_reader)
    3. Classify deviations (via detector)
    4. Write results (via data_writer)

    Transformations should be configured at the component level:
    - readers: Use transformers={'after': [...]} for post-load transformations
    - detector: Use transformers={'after': [...]} to shape the result
    - data_writer: Use transformers={'before': [...]} for pre-write
      transformations, e.g. AnomalyRecordFormatter to persist anomaly records

    Args:
        performance_reader: Data reader for actual spend
        forecast_reader: Data reader for forecast spend
        detector: Anomaly detector instance
        data_writer: Data writer for results (optional, if not provided
            results won't be written)
    """

    def __init__(
        self,
        performance_reader: DataReader,
        forecast_reader: DataReader,
        detector: AnomalyDetector,
        data_writer: Optional[DataWriter] = None,
    ):
        if not isinstance(performance_reader, DataReader):
            raise TypeError(
                f"performance_reader must be a DataReader instance, "
                f"got {type(performance_reader).__name__}"
            )

        if not isinstance(forecast_reader, DataReader):
            raise TypeError(
                f"forecast_reader must be a DataReader instance, "
                f"got {type(forecast_reader).__name__}"
            )

        if not isinstance(detector, AnomalyDetector):
            raise TypeError(
                f"detector must be an AnomalyDetector instance, "
                f"got {type(detector).__name__}"
            )

        if data_writer is not None and not isinstance(data_writer, DataWriter):
            raise TypeError(
                f"data_writer must be a DataWriter instance or None, "
                f"got {type(data_writer).__name__}"
            )

        self.performance_reader = performance_reader
        self.forecast_reader = forecast_reader
        self.detector = detector
        self.data_writer = data_writer
        self.statistics: Optional[DeviationStatistics] = None

    def _execute_detection(self) -> pd.DataFrame:
        """
        Load both sides and classify.

        Returns:
            pd.DataFrame: Classified deviations (may be empty)

        Raises:
            ValueError: If performance data is empty or incompatible
        """
        performance_df = self.performance_reader.load()
        if performance_df is None or performance_df.empty:
            raise ValueError("Performance reader returned empty dataset.")

        forecast_df = self.forecast_reader.load()
        if forecast_df is None or forecast_df.empty:
            # Every observation then follows the missing-forecast policy
            warnings.warn(
                "Forecast reader returned empty dataset; "
                "all observations are treated as missing forecasts.",
                UserWarning,
            )
            if forecast_df is None:
                forecast_df = pd.DataFrame()

        logger.info(
            "Loaded %d performance row(s) and %d forecast row(s)",
            len(performance_df),
            len(forecast_df),
        )

        result_df = self.detector.detect(
            performance_df=performance_df, forecast_df=forecast_df
        )

        if result_df is None:
            raise ValueError("Detector returned None instead of DataFrame.")

        return result_df

    def _summarize(self, result_df: pd.DataFrame) -> Optional[DeviationStatistics]:
        # 'after' transformers on the detector may have dropped the columns
        try:
            stats = summarize_frame(result_df)
        except ValueError:
            logger.info("Detection returned %d row(s)", len(result_df))
            return None

        logger.info(
            "Detection summary: %d observation(s), %d anomalies "
            "(high=%d, medium=%d, low=%d), total deviation %.2f",
            stats.total_observations,
            stats.total_anomalies,
            stats.high_severity,
            stats.medium_severity,
            stats.low_severity,
            stats.total_deviation_magnitude,
        )
        if stats.missing_forecasts:
            logger.info("%d observation(s) had no forecast", stats.missing_forecasts)
        return stats

    def run(self) -> pd.DataFrame:
        """
        Execute the complete detection workflow.

        The statistics of the last run are kept on ``self.statistics``.

        Returns:
            pd.DataFrame: The classified deviations

        Raises:
            ValueError: If loaded data is empty or incompatible
        """
        result_df = self._execute_detection()
        self.statistics = self._summarize(result_df)
        if self.data_writer:
            self.data_writer.write(result_df)
        return result_df
