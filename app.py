import logging
import os

from flask import Flask

# --- Importaciones Locales ---
from api.administradores import administradores_bp
from api.auth import auth_bp
from api.clientes import clientes_bp
from api.cuadrillas import cuadrillas_bp
from api.itinerario import itinerario_bp
from api.operarios import operarios_bp
from api.ot_tecnicas import ot_tecnicas_bp
from api.respuestas import respuesta_exitosa, registrar_manejadores
from api.valoraciones import valoraciones_bp
from config import config_dict
from infrastructure.log import setup_logging
from infrastructure.persistence.database import Database, now_str

logger = logging.getLogger(__name__)


def create_app(config_name='default'):
    """Fábrica de la aplicación: configuración, logging, base de datos y blueprints."""
    config = config_dict[config_name]

    app = Flask(__name__)
    app.config.from_object(config)

    setup_logging("api", app.config['LOG_LEVEL'], app.config['LOG_TO_FILE'], app.config['LOG_DIR'])

    # --- Base de Datos ---
    db = Database(app.config['DB_FILE'])
    db.init_schema()
    app.extensions['database'] = db

    registrar_manejadores(app)

    for blueprint in (auth_bp, clientes_bp, operarios_bp, ot_tecnicas_bp,
                      administradores_bp, itinerario_bp, cuadrillas_bp, valoraciones_bp):
        app.register_blueprint(blueprint)

    @app.route('/api/salud')
    def salud():
        return respuesta_exitosa({'estado': 'ok', 'hora': now_str()}, 'Servicio operativo')

    logger.info("action=create_app config=%s db=%s", config_name, app.config['DB_FILE'])
    return app


if __name__ == '__main__':
    app = create_app(os.environ.get('FLASK_CONFIG', 'default'))
    app.run(host='0.0.0.0', port=5000)
