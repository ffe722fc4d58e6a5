"""
Pruebas del tablero kanban.

Cubre:
    - filtrar_por_etiqueta()  - todas, sin etiqueta, nombre exacto
    - filtrar_por_fecha()     - jerarquía año, mes y día
    - agrupar_por_estado()    - las cinco columnas reparten el conjunto filtrado
    - obtener_encuestas()     - sólo filas con comentario, recientes primero, primera tarea
    - mover_encuesta()        - arrastre y menú comparten una actualización confirmada
"""

import pytest

from errores import ErrorNoEncontrado, ErrorServicio, ErrorValidacion
from servicios.tablero import (
    ESTADOS_KANBAN,
    SIN_ETIQUETA,
    agrupar_por_estado,
    dias_del_mes,
    filtrar,
    filtrar_por_etiqueta,
    filtrar_por_fecha,
    mover_encuesta,
    obtener_encuestas,
)
from conftest import dias


def _encuesta(fecha, etiquetas=None, estado='Bandeja de Entrada', id_=None):
    return {
        'id': id_ or fecha,
        'fecha_creacion': fecha,
        'etiquetas': etiquetas or [],
        'estado_kanban': estado,
        'comentario': 'x',
    }


ENCUESTAS = [
    _encuesta('2025-03-15T09:00:00+00:00', ['Limpieza']),
    _encuesta('2025-03-15T23:59:59+00:00', ['Trato'], ESTADOS_KANBAN[1]),
    _encuesta('2025-03-16T00:00:00+00:00', ['Limpieza', 'Trato'], ESTADOS_KANBAN[2]),
    _encuesta('2025-04-15T10:00:00+00:00', [], ESTADOS_KANBAN[3]),
    _encuesta('2024-03-15T10:00:00+00:00', [], ESTADOS_KANBAN[4]),
]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Filtros
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestFiltros:

    def test_todas_las_etiquetas_no_filtra(self):
        assert len(filtrar_por_etiqueta(ENCUESTAS, 'todas')) == 5

    def test_sin_etiqueta(self):
        resultado = filtrar_por_etiqueta(ENCUESTAS, SIN_ETIQUETA)
        assert [e['fecha_creacion'][:4] for e in resultado] == ['2025', '2024']

    def test_nombre_exacto_de_etiqueta(self):
        assert len(filtrar_por_etiqueta(ENCUESTAS, 'Limpieza')) == 2
        assert filtrar_por_etiqueta(ENCUESTAS, 'limpieza') == []

    def test_dia_exacto(self):
        resultado = filtrar_por_fecha(ENCUESTAS, anio=2025, mes=3, dia=15)
        assert [e['id'] for e in resultado] == [ENCUESTAS[0]['id'], ENCUESTAS[1]['id']]

    def test_solo_anio(self):
        assert len(filtrar_por_fecha(ENCUESTAS, anio=2025)) == 4

    def test_mes_sin_anio_se_ignora(self):
        assert len(filtrar_por_fecha(ENCUESTAS, mes=3)) == 5

    def test_dia_requiere_mes(self):
        assert len(filtrar_por_fecha(ENCUESTAS, anio=2025, dia=15)) == 4

    def test_dia_usa_la_zona_configurada(self):
        # 23:59 UTC del 15 ya es 16 en Madrid
        resultado = filtrar_por_fecha(ENCUESTAS, 2025, 3, 16, zona='Europe/Madrid')
        assert [e['id'] for e in resultado] == [ENCUESTAS[1]['id'], ENCUESTAS[2]['id']]

    def test_etiqueta_y_luego_fecha(self):
        resultado = filtrar(ENCUESTAS, 'Trato', anio=2025, mes=3, dia=15)
        assert [e['id'] for e in resultado] == [ENCUESTAS[1]['id']]

    def test_dias_del_mes(self):
        assert dias_del_mes(2024, 2)[-1] == 29
        assert dias_del_mes(2025, 2)[-1] == 28
        assert dias_del_mes(None, 2) == []


class TestAgrupar:

    def test_columnas_reparten_el_conjunto_filtrado(self):
        filtradas = filtrar(ENCUESTAS, anio=2025)
        columnas = agrupar_por_estado(filtradas)
        assert [c['estado'] for c in columnas] == ESTADOS_KANBAN
        ids = [e['id'] for c in columnas for e in c['encuestas']]
        assert sorted(ids) == sorted(e['id'] for e in filtradas)
        assert len(ids) == len(set(ids))
        for columna in columnas:
            assert columna['total'] == sum(1 for e in filtradas if e['estado_kanban'] == columna['estado'])

    def test_etapa_desconocida_va_a_la_bandeja(self):
        columnas = agrupar_por_estado([_encuesta('2025-01-01T00:00:00+00:00', estado=None)])
        assert columnas[0]['total'] == 1


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Carga y movimientos
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestObtenerEncuestas:

    def test_solo_con_comentario_recientes_primero(self, fake, hoy):
        vieja = fake.agregar('encuestas', comentario='vieja', estado_kanban=ESTADOS_KANBAN[0])
        fake.agregar('encuestas', comentario=None, estado_kanban=None)
        nueva = fake.agregar('encuestas', comentario='nueva', estado_kanban=ESTADOS_KANBAN[0])
        encuestas = obtener_encuestas(fake, hoy)
        assert [e['id'] for e in encuestas] == [nueva['id'], vieja['id']]

    def test_resumen_es_la_primera_tarea(self, fake, encuesta, responsable, hoy):
        fake.agregar('tareas', encuesta_id=encuesta['id'], nombre='Primera', responsable_id=responsable['id'],
                     fecha_vencimiento=dias(5), estado='Pendiente')
        fake.agregar('tareas', encuesta_id=encuesta['id'], nombre='Segunda', responsable_id=None,
                     fecha_vencimiento=dias(1), estado='Resuelta')
        tarea = obtener_encuestas(fake, hoy)[0]['tarea']
        assert tarea == {'responsable_nombre': 'Ana Pérez', 'fecha_vencimiento': dias(5), 'estado': 'Pendiente'}

    def test_sin_tarea(self, fake, encuesta, hoy):
        assert obtener_encuestas(fake, hoy)[0]['tarea'] is None


class TestMoverEncuesta:

    def test_mover_actualiza_una_fila(self, fake, encuesta):
        fila = mover_encuesta(fake, encuesta['id'], ESTADOS_KANBAN[2], 'arrastre')
        assert fila['estado_kanban'] == ESTADOS_KANBAN[2]
        assert fake.operaciones('encuestas', 'update') == 1

    def test_etapa_invalida(self, fake, encuesta):
        with pytest.raises(ErrorValidacion):
            mover_encuesta(fake, encuesta['id'], 'Otra columna')

    def test_fila_inexistente(self, fake):
        with pytest.raises(ErrorNoEncontrado):
            mover_encuesta(fake, 'no-existe', ESTADOS_KANBAN[1])

    def test_falla_conserva_la_etapa(self, fake, encuesta):
        fake.fallar('encuestas', 'update')
        with pytest.raises(ErrorServicio):
            mover_encuesta(fake, encuesta['id'], ESTADOS_KANBAN[1])
        assert fake.tablas['encuestas'][0]['estado_kanban'] == ESTADOS_KANBAN[0]


class TestRutasTablero:

    def test_requiere_token(self, client):
        respuesta = client.get('/admin/tablero')
        assert respuesta.status_code == 401
        assert respuesta.get_json()['error'] == 'Token es requerido'

    def test_tablero_con_filtros(self, client, fake, auth_headers):
        fake.agregar('encuestas', comentario='a', estado_kanban=ESTADOS_KANBAN[0],
                     fecha_creacion='2025-03-15T12:00:00+00:00', etiquetas=['Trato'])
        fake.agregar('encuestas', comentario='b', estado_kanban=ESTADOS_KANBAN[1],
                     fecha_creacion='2025-03-14T12:00:00+00:00')
        respuesta = client.get('/admin/tablero?anio=2025&mes=3&dia=15', headers=auth_headers)
        datos = respuesta.get_json()
        assert respuesta.status_code == 200
        assert datos['total'] == 1
        assert datos['columnas'][0]['total'] == 1
        assert datos['anios_disponibles'] == [2025]
        assert len(datos['dias_del_mes']) == 31

    def test_mes_invalido(self, client, auth_headers):
        respuesta = client.get('/admin/tablero?anio=2025&mes=13', headers=auth_headers)
        assert respuesta.status_code == 400

    def test_busqueda_acota_el_vocabulario(self, client, fake, auth_headers):
        fake.agregar('etiquetas', nombre='Limpieza')
        fake.agregar('etiquetas', nombre='Trato')
        datos = client.get('/admin/tablero?buscar_etiqueta=lim', headers=auth_headers).get_json()
        assert [e['nombre'] for e in datos['etiquetas']] == ['Limpieza']

    def test_ruta_para_mover(self, client, encuesta, auth_headers):
        respuesta = client.put(
            f"/admin/encuestas/{encuesta['id']}/estado",
            json={'estado_kanban': ESTADOS_KANBAN[4], 'origen': 'menu'},
            headers=auth_headers
        )
        assert respuesta.status_code == 200
        assert respuesta.get_json()['encuesta']['estado_kanban'] == ESTADOS_KANBAN[4]

    def test_falla_al_mover_es_502(self, client, fake, encuesta, auth_headers):
        fake.fallar('encuestas', 'update')
        respuesta = client.put(
            f"/admin/encuestas/{encuesta['id']}/estado",
            json={'estado_kanban': ESTADOS_KANBAN[4]},
            headers=auth_headers
        )
        assert respuesta.status_code == 502
        assert respuesta.get_json()['error'] == 'Error al mover el comentario'
