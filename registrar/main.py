"""
Main entry point for the registrar platform.
"""

import argparse
import logging
from typing import Optional

from .api.rest_api import RegistrarRestAPI
from .config import describe_scale, load_config
from .core.exceptions import ConfigurationError
from .core.grading import GradeScale
from .persistence import (
    AssessmentRepository, DatabaseFactory, EnrollmentRepository,
    PrerequisiteRepository, ScoreRepository,
)
from .services import GradingService, PrerequisiteChecker

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


class RegistrarPlatform:
    """Wires the database, repositories, services and REST API together."""

    def __init__(self, config: Optional[dict] = None):
        self._config = config if config is not None else load_config()
        self._database = None
        self._repositories = {}
        self._grading_service = None
        self._prerequisite_checker = None
        self._rest_api = None

        self._initialize_platform()

    def _initialize_platform(self):
        """Initialize the platform with all services."""
        db_type = self._config.get('database_type', 'sqlite')
        db_config = self._config.get('database_config', {})
        self._database = DatabaseFactory.create_database(db_type, **db_config)
        logger.info("Database initialized: %s %s", db_type, db_config)

        self._repositories = {
            'assessment': AssessmentRepository(self._database),
            'score': ScoreRepository(self._database),
            'prerequisite': PrerequisiteRepository(self._database),
            'enrollment': EnrollmentRepository(self._database),
        }

        grade_scale = GradeScale.from_config(self._config.get('grade_scale') or [])
        logger.info("Grade scale: %s", describe_scale(grade_scale))

        self._grading_service = GradingService(
            catalog=self._repositories['assessment'],
            scores=self._repositories['score'],
            history=self._repositories['enrollment'],
            grade_scale=grade_scale,
        )
        prevent_cycles = self._config.get('prerequisites', {}).get('prevent_cycles', False)
        self._prerequisite_checker = PrerequisiteChecker(
            store=self._repositories['prerequisite'],
            history=self._repositories['enrollment'],
            prevent_cycles=prevent_cycles,
        )
        logger.info("Services initialized (prerequisite cycle prevention %s)",
                    "on" if prevent_cycles else "off")

        self._rest_api = RegistrarRestAPI(self._grading_service, self._prerequisite_checker)

    @property
    def grading_service(self) -> GradingService:
        return self._grading_service

    @property
    def prerequisite_checker(self) -> PrerequisiteChecker:
        return self._prerequisite_checker

    @property
    def app(self):
        """The FastAPI application."""
        return self._rest_api.app

    def start_rest_server(self, host: Optional[str] = None, port: Optional[int] = None):
        """Run the REST server until interrupted."""
        import uvicorn

        rest_config = self._config.get('rest', {})
        host = host or rest_config.get('host', '0.0.0.0')
        port = port or rest_config.get('port', 8000)
        logger.info("REST API on http://%s:%s (docs at /docs)", host, port)
        uvicorn.run(
            self.app,
            host=host,
            port=port,
            log_level=self._config.get('log_level', 'INFO').lower()
        )


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Registrar grading service")
    parser.add_argument("--host", type=str, help="REST server host")
    parser.add_argument("--port", type=int, help="REST server port")
    parser.add_argument("--config", type=str, help="Configuration file path")
    parser.add_argument("--log-level", type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        parser.error(e.message)
    if args.log_level:
        config['log_level'] = args.log_level

    configure_logging(config['log_level'])

    platform = RegistrarPlatform(config)
    try:
        platform.start_rest_server(args.host, args.port)
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
