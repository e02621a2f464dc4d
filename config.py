import os
import tempfile
from dotenv import load_dotenv

# Cargar variables del archivo .env
load_dotenv()

class Config:
    """Configuración base que se usa en producción y desarrollo."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'clave-por-defecto-insegura'
    DEBUG = False
    TESTING = False

    # Base de Datos
    DB_FILE = os.environ.get('DB_NAME', 'cooperativa.db')

    # Paginación
    PER_PAGE = 20

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR')
    LOG_TO_FILE = os.environ.get('LOG_TO_FILE', 'False') == 'True'

    # Límites de listados
    LIMITE_OTS_PENDIENTES = 100
    LIMITE_VALORACIONES_RECIENTES = 10

class DevelopmentConfig(Config):
    DEBUG = True
    LOG_TO_FILE = os.environ.get('LOG_TO_FILE', 'True') == 'True'

class ProductionConfig(Config):
    DEBUG = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'WARNING')

class TestingConfig(Config):
    TESTING = True
    LOG_TO_FILE = False
    SECRET_KEY = 'clave-de-pruebas'
    DB_FILE = os.path.join(tempfile.gettempdir(), 'cooperativa_test.db')

# Diccionario para seleccionar configuración fácilmente
config_dict = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
