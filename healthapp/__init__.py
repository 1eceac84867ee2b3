# /healthapp/__init__.py
# Inicializa la aplicación Flask y sus extensiones (Application Factory).

import logging
import os

from dotenv import load_dotenv
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

# Cargar variables de entorno desde el archivo .env
load_dotenv()

# --- Base de datos compartida (usuarios, sesiones, auditoría, registros) ---
db = SQLAlchemy()


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignora ON DELETE CASCADE si no se activan las foreign keys."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_app(test_config=None):
    """Crea y configura la instancia de la aplicación Flask."""
    app = Flask(__name__, instance_relative_config=True)

    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "change-this-in-prod")
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")
    app.config["WORKOUTS_PAGE_SIZE"] = int(os.getenv("WORKOUTS_PAGE_SIZE", "10"))

    # Weather (OpenWeatherMap)
    app.config["OPENWEATHER_API_KEY"] = os.getenv("OPENWEATHER_API_KEY")
    app.config["WEATHER_BASE_API"] = os.getenv(
        "WEATHER_BASE_API", "https://api.openweathermap.org/data/2.5/weather"
    )
    app.config["WEATHER_TIMEOUT"] = float(os.getenv("WEATHER_TIMEOUT", "5"))

    # Asegurarse de que la carpeta 'instance' exista para la base SQLite
    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        pass

    db_path = os.path.join(app.instance_path, "health.db")
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", f"sqlite:///{db_path}")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config["LOG_LEVEL"])
    logging.getLogger("security").setLevel(app.config["LOG_LEVEL"])
    logging.getLogger("healthapp").setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)

    # Autenticación: sesiones de servidor, CSRF, rate limiting, blueprint /auth
    import security
    security.init_app(app)

    from . import models  # noqa: F401  (tablas de entidades propias)

    # Registrar Blueprints (módulos de la aplicación)
    from .main import main as main_blueprint
    app.register_blueprint(main_blueprint)

    from .workouts import workouts as workouts_blueprint
    app.register_blueprint(workouts_blueprint)

    from .metrics import metrics as metrics_blueprint
    app.register_blueprint(metrics_blueprint)

    from .admin import admin as admin_blueprint
    app.register_blueprint(admin_blueprint)

    from .errors import register_error_handlers
    register_error_handlers(app)

    from .commands import register_commands
    register_commands(app)

    # Crear las tablas si no existen
    with app.app_context():
        db.create_all()

    return app
