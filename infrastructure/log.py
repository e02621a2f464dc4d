import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

_FORMAT = "%(asctime)s service=%(name)s level=%(levelname)s msg=%(message)s"


def setup_logging(
    service: str,
    level: Union[str, int] = "INFO",
    enable_file: Optional[bool] = None,
    logs_dir: Optional[str] = None,
    filename: Optional[str] = None,
    max_bytes: int = 5_000_000,
    backup_count: int = 3,
) -> logging.Logger:
    """Configura el logging de la aplicación (stdout + archivo rotativo opcional).

    Args:
        service: nombre lógico del servicio (api, scripts, etc.)
        level: nivel como texto o entero, por defecto INFO
        enable_file: fuerza la escritura a archivo; si es None se activa con ENV=development
        logs_dir: carpeta destino (por defecto ./logs)
        filename: nombre del archivo (por defecto f"{service}.log")
    """
    lvl = logging.getLevelName(level) if isinstance(level, str) else level
    logging.basicConfig(level=lvl, format=_FORMAT)
    logger = logging.getLogger(service)
    logger.setLevel(lvl)

    # El archivo cuelga del logger raíz para recibir también los logs de los servicios
    root = logging.getLogger()
    if any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        return logger

    if enable_file is None:
        enable_file = os.getenv("ENV", "development").lower() == "development"
    if enable_file:
        try:
            base_dir = Path(logs_dir) if logs_dir else (Path.cwd() / "logs")
            base_dir.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(base_dir / (filename or f"{service}.log"),
                                     maxBytes=max_bytes, backupCount=backup_count)
            fh.setFormatter(logging.Formatter(_FORMAT))
            fh.setLevel(lvl)
            root.addHandler(fh)
            logger.debug("action=logging file_handler=enabled path=%s", base_dir)
        except OSError as exc:
            logger.error("action=logging file_handler=failed error=%s", exc)
    return logger
