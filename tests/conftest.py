"""Fixtures compartidas: un sustituto en memoria del cliente de Supabase y la app de Flask."""

import copy
import itertools
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError
from supabase import AuthApiError

from app import create_app
from autenticacion import crear_token


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Cliente de Supabase en memoria
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _comparable(valor):
    if isinstance(valor, str):
        try:
            fecha = datetime.fromisoformat(valor.replace('Z', '+00:00'))
        except ValueError:
            return valor
        if len(valor) == 10:
            return datetime.combine(fecha.date(), datetime.min.time(), tzinfo=timezone.utc)
        return fecha if fecha.tzinfo else fecha.replace(tzinfo=timezone.utc)
    return valor


class FakeQuery:

    def __init__(self, db, tabla):
        self.db = db
        self.tabla = tabla
        self.operacion = None
        self.valores = None
        self.columnas = '*'
        self.filtros = []
        self.orden = []
        self.limite = None
        self._negar = False

    # Operaciones
    def select(self, columnas='*'):
        self.operacion = 'select'
        self.columnas = columnas
        return self

    def insert(self, valores):
        self.operacion = 'insert'
        self.valores = valores
        return self

    def update(self, valores):
        self.operacion = 'update'
        self.valores = valores
        return self

    def delete(self):
        self.operacion = 'delete'
        return self

    # Filtros
    def _filtro(self, predicado):
        if self._negar:
            self._negar = False
            self.filtros.append(lambda fila: not predicado(fila))
        else:
            self.filtros.append(predicado)
        return self

    @property
    def not_(self):
        self._negar = True
        return self

    def eq(self, columna, valor):
        return self._filtro(lambda fila: fila.get(columna) == valor)

    def neq(self, columna, valor):
        return self._filtro(lambda fila: fila.get(columna) != valor)

    def lt(self, columna, valor):
        return self._filtro(
            lambda fila: fila.get(columna) is not None and _comparable(fila[columna]) < _comparable(valor)
        )

    def gte(self, columna, valor):
        return self._filtro(
            lambda fila: fila.get(columna) is not None and _comparable(fila[columna]) >= _comparable(valor)
        )

    def in_(self, columna, valores):
        return self._filtro(lambda fila: fila.get(columna) in valores)

    def is_(self, columna, valor):
        assert valor == 'null'
        return self._filtro(lambda fila: fila.get(columna) is None)

    def contains(self, columna, valores):
        return self._filtro(lambda fila: all(v in (fila.get(columna) or []) for v in valores))

    def order(self, columna, desc=False):
        self.orden.append((columna, desc))
        return self

    def limit(self, cantidad):
        self.limite = cantidad
        return self

    # Ejecución
    def _coincide(self, fila):
        return all(f(fila) for f in self.filtros)

    def _embeber(self, fila):
        if 'responsables(' in self.columnas:
            responsable = next(
                (r for r in self.db.tablas['responsables'] if r['id'] == fila.get('responsable_id')),
                None
            )
            fila['responsables'] = {'nombre': responsable['nombre']} if responsable else None
        return fila

    def execute(self):
        self.db.registrar(self)
        self.db.verificar_falla(self.tabla, self.operacion)
        filas = self.db.tablas.setdefault(self.tabla, [])

        if self.operacion == 'insert':
            nuevas = self.valores if isinstance(self.valores, list) else [self.valores]
            creadas = [self.db.completar(self.tabla, dict(v)) for v in nuevas]
            filas.extend(creadas)
            return SimpleNamespace(data=copy.deepcopy(creadas))

        seleccion = [f for f in filas if self._coincide(f)]

        if self.operacion == 'update':
            for fila in seleccion:
                fila.update(copy.deepcopy(self.valores))
            return SimpleNamespace(data=copy.deepcopy(seleccion))

        if self.operacion == 'delete':
            self.db.tablas[self.tabla] = [f for f in filas if not self._coincide(f)]
            return SimpleNamespace(data=copy.deepcopy(seleccion))

        resultado = copy.deepcopy(seleccion)
        for columna, desc in reversed(self.orden):
            resultado.sort(
                key=lambda f: (f.get(columna) is None, _comparable(f[columna]) if f.get(columna) is not None else 0),
                reverse=desc
            )
        if self.limite is not None:
            resultado = resultado[:self.limite]
        return SimpleNamespace(data=[self._embeber(f) for f in resultado])


class FakeAuth:

    def __init__(self):
        self.usuarios = {}
        self.error = None

    def sign_in_with_password(self, credenciales):
        if self.error is not None:
            raise self.error
        usuario = self.usuarios.get(credenciales['email'])
        if not usuario or usuario['password'] != credenciales['password']:
            raise AuthApiError('Invalid login credentials', 400, 'invalid_credentials')
        return SimpleNamespace(
            session=SimpleNamespace(access_token='token-supabase'),
            user=SimpleNamespace(id=usuario['id'], email=credenciales['email'])
        )


class FakeSupabase:

    def __init__(self):
        self.tablas = {'encuestas': [], 'etiquetas': [], 'tareas': [], 'responsables': []}
        self.auth = FakeAuth()
        self.consultas = []
        self.fallas = []
        self._reloj = itertools.count()

    def table(self, nombre):
        return FakeQuery(self, nombre)

    def registrar(self, consulta):
        self.consultas.append((consulta.tabla, consulta.operacion))

    def fallar(self, tabla, operacion, despues_de=0, veces=1):
        """Hace fallar ``veces`` veces la operación tras ``despues_de`` ejecuciones exitosas."""
        self.fallas.append({'tabla': tabla, 'operacion': operacion, 'restantes': despues_de, 'veces': veces})

    def verificar_falla(self, tabla, operacion):
        for falla in self.fallas:
            if falla['tabla'] != tabla or falla['operacion'] != operacion:
                continue
            if falla['restantes'] > 0:
                falla['restantes'] -= 1
            elif falla['veces'] > 0:
                falla['veces'] -= 1
                raise APIError({'message': 'fallo simulado', 'code': '500', 'hint': None, 'details': None})

    def operaciones(self, tabla, operacion):
        return sum(1 for t, o in self.consultas if t == tabla and o == operacion)

    def completar(self, tabla, fila):
        fila.setdefault('id', str(uuid.uuid4()))
        marca = (datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=next(self._reloj))).isoformat()
        if tabla == 'encuestas':
            fila.setdefault('fecha_creacion', marca)
            fila.setdefault('etiquetas', [])
            fila.setdefault('notas_internas', None)
        else:
            fila.setdefault('created_at', marca)
        return fila

    # Atajos para preparar datos
    def agregar(self, tabla, **valores):
        fila = self.completar(tabla, valores)
        self.tablas[tabla].append(fila)
        return fila


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Fixtures
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@pytest.fixture
def fake():
    return FakeSupabase()


@pytest.fixture
def app(fake):
    return create_app(
        {'TESTING': True, 'SECRET_KEY': 'clave-de-pruebas', 'ZONA_HORARIA': 'UTC'},
        cliente=fake,
        fabrica_auth=lambda: fake
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    with app.app_context():
        token = crear_token('admin-1', 'admin@imv.test')
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def hoy():
    return datetime.now(timezone.utc).date()


def dias(n, desde=None):
    return ((desde or datetime.now(timezone.utc).date()) + timedelta(days=n)).isoformat()


@pytest.fixture
def responsable(fake):
    return fake.agregar('responsables', nombre='Ana Pérez', email='ana@imv.test')


@pytest.fixture
def encuesta(fake):
    return fake.agregar(
        'encuestas',
        pregunta1_amabilidad='Sí',
        pregunta2_tiempo_espera='Menos de 5 minutos',
        pregunta3_resolucion_dudas='Sí',
        pregunta4_limpieza='Excelente',
        pregunta5_calificacion_general='Excelente',
        comentario='Muy buena atención',
        estado_kanban='Bandeja de Entrada',
    )


