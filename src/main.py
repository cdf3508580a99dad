"""
Proctor Monitor entry point.

Two roles share one config:
- `serve`: the session store API (event ingestion, reports, health).
- `monitor`: the candidate-side client (camera -> inference -> detection
  state machine -> event queue -> session store).

Usage:
    python src/main.py serve --config config/config.yaml
    python src/main.py monitor --config config/config.yaml --display --objects

Arguments:
    --config: Path to configuration file
    --display: Show a preview window with the operator status (monitor)
    --performance / --no-performance: Override detection.performance_mode (monitor)
    --objects: Enable object detection (monitor)
    --export-log: Write the display log as CSV on exit (monitor)
"""

import os
import sys
import argparse
import logging
from typing import Dict, Any, List, Optional, Tuple

import yaml
import uvicorn

from models.config import Config
from ops.logging import setup_logging
from pipeline.engine import create_engine_from_config
from runtime.context import create_runtime
from web.app import create_app
from web.state import state as web_state


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['server', 'client', 'capture', 'detection', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Server
    server = config.get('server') or {}
    port = server.get('port', 4000)
    if not isinstance(port, int) or not (0 < port < 65536):
        return False, "server.port must be an integer between 1 and 65535"
    if not isinstance(server.get('cors_origins', []), list):
        return False, "server.cors_origins must be a list"
    for key in ('report_max_rows', 'report_line_chars'):
        if key in server and (not isinstance(server[key], int) or server[key] <= 0):
            return False, f"server.{key} must be a positive integer"

    # Client
    client = config.get('client') or {}
    api_base = client.get('api_base', 'http://localhost:4000')
    if not isinstance(api_base, str) or not api_base.startswith(('http://', 'https://')):
        return False, "client.api_base must be an http(s) URL"
    for key in ('request_timeout_s', 'flush_interval_s'):
        if key in client and (not _is_number(client[key]) or client[key] <= 0):
            return False, f"client.{key} must be a positive number"

    # Capture
    capture = config.get('capture') or {}
    device_id = capture.get('device_id', 0)
    if not isinstance(device_id, (int, str)):
        return False, "capture.device_id must be an integer (index) or string (file path)"
    if isinstance(device_id, int) and device_id < 0:
        return False, "capture.device_id integer must be non-negative"
    for key in ('resolution', 'performance_resolution'):
        if key in capture:
            res = capture[key]
            if not isinstance(res, list) or len(res) != 2:
                return False, f"capture.{key} must be a list of [width, height]"
            if not all(isinstance(x, int) and x > 0 for x in res):
                return False, f"capture.{key} values must be positive integers"
    for key in ('fps', 'performance_fps'):
        if key in capture and (not isinstance(capture[key], int) or capture[key] <= 0):
            return False, f"capture.{key} must be a positive integer"

    # Detection
    detection = config.get('detection') or {}
    for key in ('face_every_n_frames', 'face_every_n_frames_performance', 'max_faces'):
        if key in detection and (not isinstance(detection[key], int) or detection[key] <= 0):
            return False, f"detection.{key} must be a positive integer"
    for key in ('absence_seconds', 'focus_away_seconds', 'object_interval_s', 'object_interval_performance_s'):
        if key in detection and (not _is_number(detection[key]) or detection[key] <= 0):
            return False, f"detection.{key} must be a positive number"
    for key in ('gaze_threshold', 'gaze_smoothing', 'object_confidence', 'face_min_confidence'):
        if key in detection and (not _is_number(detection[key]) or not (0 < detection[key] <= 1)):
            return False, f"detection.{key} must be between 0 and 1"
    classes = detection.get('object_classes', [])
    if not isinstance(classes, list) or not all(isinstance(c, str) for c in classes):
        return False, "detection.object_classes must be a list of strings"

    # Log settings
    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Proctor Monitor')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='Run the session store API')
    serve.add_argument('--host', type=str, default=None, help='Override server.host')
    serve.add_argument('--port', type=int, default=None, help='Override server.port')

    monitor = sub.add_parser('monitor', help='Run the candidate monitoring client')
    monitor.add_argument('--display', action='store_true',
                         help='Show a preview window with the operator status')
    monitor.add_argument('--performance', dest='performance', action='store_true', default=None,
                         help='Reduced-resource mode (lower resolution and cadence)')
    monitor.add_argument('--no-performance', dest='performance', action='store_false', default=None,
                         help='Full-resolution mode')
    monitor.add_argument('--objects', action='store_true',
                         help='Enable object detection')
    monitor.add_argument('--candidate', type=str, default=None,
                         help='Override client.candidate_name')
    monitor.add_argument('--export-log', type=str, default=None,
                         help='Write the display log as CSV to this path on exit')
    return parser


def apply_overrides(cfg: Config, args: argparse.Namespace) -> Config:
    """Fold command-line overrides into the typed config."""
    if args.command == 'serve':
        if args.host:
            cfg.server.host = args.host
        env_port = os.environ.get('PORT')
        if args.port is not None:
            cfg.server.port = args.port
        elif env_port:
            cfg.server.port = int(env_port)
    elif args.command == 'monitor':
        if args.performance is not None:
            cfg.detection.performance_mode = args.performance
        if args.objects:
            cfg.detection.objects_enabled = True
        if args.candidate:
            cfg.client.candidate_name = args.candidate
    return cfg


def run_server(cfg: Config, config_path: str) -> None:
    web_state.set_config(cfg, config_path)
    app = create_app(cfg)
    logging.info(f"Session store listening on {cfg.server.host}:{cfg.server.port}")
    uvicorn.run(app, host=cfg.server.host, port=cfg.server.port, log_level=cfg.log_level.lower())


def run_monitor(cfg: Config, args: argparse.Namespace) -> None:
    ctx = create_runtime(cfg)
    for modality, reason in ctx.degraded.items():
        logging.warning(f"Running without {modality} detection: {reason}")
    engine = create_engine_from_config(cfg, ctx, display=args.display, export_log_path=args.export_log)
    engine.run()


def main(argv: Optional[List[str]] = None):
    """Main application function."""
    args = build_parser().parse_args(argv)

    raw = load_config(args.config)
    is_valid, error_msg = validate_config(raw)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    setup_logging(raw['log_path'], raw['log_level'])
    cfg = apply_overrides(Config.from_dict(raw), args)

    if args.command == 'serve':
        logging.info("Starting Proctor Monitor session store")
        run_server(cfg, args.config)
    else:
        logging.info(
            f"Starting Proctor Monitor client (performance={cfg.detection.performance_mode}, "
            f"objects={cfg.detection.objects_enabled})"
        )
        run_monitor(cfg, args)


if __name__ == "__main__":
    main()
