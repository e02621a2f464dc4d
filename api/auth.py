import logging
from functools import wraps

from flask import Blueprint, session
from werkzeug.security import check_password_hash

from api.contexto import get_db
from api.respuestas import datos_json, respuesta_error, respuesta_exitosa
from domain.errors import ForbiddenError, ValidationError
from domain.models import as_dict
from infrastructure.persistence.catalog_repository import CatalogRepository, StaffRepository
from infrastructure.persistence.user_repository import UserRepository

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


# --- Decoradores ---
def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'usuario_id' not in session:
            return respuesta_error('Por favor, inicia sesión.', 401)
        return f(*args, **kwargs)
    return decorated_function


def rol_requerido(*roles):
    def decorator(f):
        @wraps(f)
        @login_required
        def decorated_function(*args, **kwargs):
            if session.get('rol') not in roles:
                return respuesta_error('No tienes permisos para acceder a este recurso', 403)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def socio_actual() -> int:
    socio_id = session.get('socio_id')
    if not socio_id:
        raise ForbiddenError('Solo los socios pueden acceder a este recurso')
    return socio_id


def empleado_actual() -> int:
    empleado_id = session.get('empleado_id')
    if not empleado_id:
        raise ForbiddenError('Solo los empleados pueden acceder a este recurso')
    return empleado_id


# --- Rutas de Autenticación ---
@auth_bp.route('/login', methods=['POST'])
def login():
    datos = datos_json()
    email = (datos.get('email') or '').strip().lower()
    password = datos.get('password') or ''
    if not email or not password:
        raise ValidationError('Email y contraseña son requeridos')

    with get_db().connection() as conn:
        user = UserRepository(conn).get_by_email(email)

    if user and user.activo and check_password_hash(user.password_hash, password):
        session.clear()
        session['usuario_id'] = user.usuario_id
        session['email'] = user.email
        session['rol'] = user.rol.value
        session['socio_id'] = user.socio_id
        session['empleado_id'] = user.empleado_id
        logger.info("action=login usuario_id=%s rol=%s", user.usuario_id, user.rol.value)
        return respuesta_exitosa({
            'usuario_id': user.usuario_id,
            'email': user.email,
            'rol': user.rol.value,
            'socio_id': user.socio_id,
            'empleado_id': user.empleado_id
        }, 'Inicio de sesión exitoso')

    logger.warning("action=login rejected email=%s", email)
    return respuesta_error('Email o contraseña incorrectos', 401)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    session.clear()
    return respuesta_exitosa(None, 'Sesión cerrada')


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    with get_db().connection() as conn:
        user = UserRepository(conn).get_by_id(session['usuario_id'])
        if user is None or not user.activo:
            session.clear()
            return respuesta_error('Por favor, inicia sesión.', 401)
        perfil = {
            'usuario_id': user.usuario_id,
            'email': user.email,
            'rol': user.rol.value,
            'socio': None,
            'empleado': None
        }
        if session.get('socio_id'):
            perfil['socio'] = CatalogRepository(conn).get_member(session['socio_id'])
            perfil['cuentas'] = CatalogRepository(conn).list_accounts_by_member(session['socio_id'])
        if session.get('empleado_id'):
            empleado = StaffRepository(conn).get_employee(session['empleado_id'])
            perfil['empleado'] = as_dict(empleado) if empleado else None
            perfil['cuadrilla'] = StaffRepository(conn).get_active_crew_of(session['empleado_id'])
    return respuesta_exitosa(perfil, 'Perfil obtenido')
