import os
from dotenv import load_dotenv

# Configuración de la aplicación
load_dotenv()


def _lista(valor):
    return [parte.strip() for parte in valor.split(',') if parte.strip()]


class Config:
    # Supabase
    DATABASE_URL = os.getenv('DATABASE_URL')
    DATABASE_KEY = os.getenv('DATABASE_KEY')

    # Tokens de administración y cookie de la encuesta
    SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    JWT_EXPIRACION_HORAS = int(os.getenv('JWT_EXPIRACION_HORAS', '24'))

    CORS_ORIGINS = _lista(os.getenv('CORS_ORIGINS', 'http://localhost:8080,http://127.0.0.1:8080'))

    # Zona usada para "hoy" y para los filtros por fecha
    ZONA_HORARIA = os.getenv('ZONA_HORARIA', 'UTC')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
