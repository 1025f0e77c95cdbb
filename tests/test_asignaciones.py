"""Tests de asignaciones: creación, conflictos de horario, edición, borrado,
listados, horarios, idempotencia y errores internos."""
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from kampus.core.errores import MENSAJE_ERROR_INTERNO
from kampus.models import Asignacion
from kampus.models.asignacion import INDICE_CONFLICTO_DOCENTE
from kampus.services import asignacion_service

from tests.conftest import BASE_URL


async def crear(client, headers, payload, **cambios):
    r = await client.post("/asignaciones", json={**payload, **cambios}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]


# ─── CREACIÓN ─────────────────────────────────────────────────────────────────

class TestCrear:
    async def test_crea_con_relaciones(self, client, datos, admin, asignacion_valida):
        r = await client.post("/asignaciones", json=asignacion_valida, headers=admin)
        assert r.status_code == 201
        data = r.json()["data"]
        assert data["estado"] == "activo"
        assert data["nombre_docente"] == "Docente1 Prueba"
        assert data["nombre_asignatura"] == "Álgebra"
        assert data["nombre_grupo"] == "6-A"
        assert data["docente"]["user"]["username"] == "docente1"
        assert data["grupo"]["grado"]["nombre"] == "Sexto"
        assert data["franja_horaria"]["hora_inicio"] == "07:00"
        assert data["periodo"]["id"] == datos.periodo_id

    async def test_periodo_opcional(self, client, datos, admin, asignacion_valida):
        data = await crear(client, admin, asignacion_valida, periodo_id=None)
        assert data["periodo_id"] is None
        assert data["periodo"] is None

    async def test_clave_foranea_inexistente(self, client, datos, admin, asignacion_valida):
        """Una referencia que no existe es 422 con error por campo, nunca 500."""
        r = await client.post(
            "/asignaciones", json={**asignacion_valida, "docente_id": 9999, "grupo_id": 9999}, headers=admin
        )
        assert r.status_code == 422
        errores = r.json()["errors"]
        assert errores["docente_id"] == ["El docente seleccionado no existe."]
        assert errores["grupo_id"] == ["El grupo seleccionado no existe."]
        assert "conflicto" not in r.json()

    async def test_dia_invalido(self, client, datos, admin, asignacion_valida):
        r = await client.post("/asignaciones", json={**asignacion_valida, "dia_semana": "domingo"}, headers=admin)
        assert r.status_code == 422
        assert r.json()["errors"]["dia_semana"] == ["El día de la semana debe ser válido."]

    async def test_campo_requerido(self, client, datos, admin, asignacion_valida):
        payload = dict(asignacion_valida)
        del payload["franja_horaria_id"]
        r = await client.post("/asignaciones", json=payload, headers=admin)
        assert r.status_code == 422
        assert "franja_horaria_id" in r.json()["errors"]

    async def test_periodo_de_otro_anio(self, client, datos, admin, asignacion_valida):
        r = await client.post(
            "/asignaciones", json={**asignacion_valida, "periodo_id": datos.periodo_otro_anio_id}, headers=admin
        )
        assert r.status_code == 422
        assert r.json()["errors"]["periodo_id"] == [
            "El período seleccionado no pertenece al año académico especificado."
        ]


# ─── CONFLICTOS ───────────────────────────────────────────────────────────────

class TestConflictos:
    async def test_conflicto_de_docente(self, client, datos, admin, asignacion_valida):
        primera = await crear(client, admin, asignacion_valida)
        r = await client.post(
            "/asignaciones", json={**asignacion_valida, "grupo_id": datos.grupo_b_id}, headers=admin
        )
        assert r.status_code == 422
        cuerpo = r.json()
        assert cuerpo["conflicto"] is True
        assert cuerpo["tipo_conflicto"] == "docente"
        assert cuerpo["message"] == "El docente ya tiene una asignación en este horario"
        assert cuerpo["asignacion_conflictiva"]["id"] == primera["id"]

    async def test_conflicto_de_grupo(self, client, datos, admin, asignacion_valida):
        await crear(client, admin, asignacion_valida)
        r = await client.post(
            "/asignaciones", json={**asignacion_valida, "docente_id": datos.docente_2_id}, headers=admin
        )
        assert r.status_code == 422
        assert r.json()["conflicto"] is True
        assert r.json()["tipo_conflicto"] == "grupo"

    async def test_docente_se_reporta_antes_que_grupo(self, client, datos, admin, asignacion_valida):
        await crear(client, admin, asignacion_valida)
        r = await client.post("/asignaciones", json=asignacion_valida, headers=admin)
        assert r.json()["tipo_conflicto"] == "docente"

    @pytest.mark.parametrize(
        "cambio",
        [
            {"dia_semana": "martes"},
            {"franja_horaria_id": "franja_2"},
            {"anio_academico_id": "otro_anio", "periodo_id": None},
        ],
    )
    async def test_sin_conflicto_si_cambia_la_llave(self, client, datos, admin, asignacion_valida, cambio):
        await crear(client, admin, asignacion_valida)
        valores = {
            "franja_2": datos.franja_2_id,
            "otro_anio": datos.otro_anio_id,
        }
        cambio = {k: valores.get(v, v) for k, v in cambio.items()}
        await crear(client, admin, asignacion_valida, **cambio)

    async def test_inactiva_no_ocupa_horario(self, client, datos, admin, asignacion_valida):
        await crear(client, admin, asignacion_valida, estado="inactivo")
        await crear(client, admin, asignacion_valida)
        await crear(client, admin, asignacion_valida, estado="inactivo")

    async def test_no_se_sobrescribe_en_silencio(self, client, datos, admin, asignacion_valida):
        primera = await crear(client, admin, asignacion_valida)
        await client.post("/asignaciones", json={**asignacion_valida, "grupo_id": datos.grupo_b_id}, headers=admin)
        r = await client.get(f"/asignaciones/{primera['id']}", headers=admin)
        assert r.json()["data"]["grupo_id"] == datos.grupo_a_id
        r = await client.get("/asignaciones", headers=admin)
        assert r.json()["meta"]["total"] == 1

    async def test_indice_unico_respalda_la_verificacion(
        self, client, datos, admin, asignacion_valida, monkeypatch
    ):
        """Si dos peticiones pasan la verificación a la vez, la BD rechaza la segunda."""
        primera = await crear(client, admin, asignacion_valida)
        real = asignacion_service.buscar_conflicto
        llamadas = []

        async def verificacion_tardia(db, datos_asignacion, excluir_id=None):
            llamadas.append(1)
            if len(llamadas) == 1:
                return None
            return await real(db, datos_asignacion, excluir_id)

        monkeypatch.setattr(asignacion_service, "buscar_conflicto", verificacion_tardia)
        r = await client.post(
            "/asignaciones", json={**asignacion_valida, "grupo_id": datos.grupo_b_id}, headers=admin
        )
        assert r.status_code == 422
        cuerpo = r.json()
        assert cuerpo["conflicto"] is True
        assert cuerpo["tipo_conflicto"] == "docente"
        assert cuerpo["asignacion_conflictiva"]["id"] == primera["id"]


# ─── EDICIÓN Y BORRADO ────────────────────────────────────────────────────────

class TestActualizar:
    async def test_guardar_sin_cambios_no_choca_consigo_misma(self, client, datos, admin, asignacion_valida):
        data = await crear(client, admin, asignacion_valida)
        r = await client.put(f"/asignaciones/{data['id']}", json=asignacion_valida, headers=admin)
        assert r.status_code == 200

    async def test_mover_a_horario_ocupado(self, client, datos, admin, asignacion_valida):
        await crear(client, admin, asignacion_valida)
        otra = await crear(client, admin, asignacion_valida, dia_semana="martes")
        r = await client.put(f"/asignaciones/{otra['id']}", json={"dia_semana": "lunes"}, headers=admin)
        assert r.status_code == 422
        assert r.json()["conflicto"] is True

        r = await client.get(f"/asignaciones/{otra['id']}", headers=admin)
        assert r.json()["data"]["dia_semana"] == "martes"

    async def test_activar_inactiva_en_horario_ocupado(self, client, datos, admin, asignacion_valida):
        await crear(client, admin, asignacion_valida)
        inactiva = await crear(client, admin, asignacion_valida, grupo_id=datos.grupo_b_id, estado="inactivo")
        r = await client.put(f"/asignaciones/{inactiva['id']}", json={"estado": "activo"}, headers=admin)
        assert r.status_code == 422
        assert r.json()["tipo_conflicto"] == "docente"

    async def test_cambio_parcial(self, client, datos, admin, asignacion_valida):
        data = await crear(client, admin, asignacion_valida)
        r = await client.put(
            f"/asignaciones/{data['id']}", json={"asignatura_id": datos.geometria_id}, headers=admin
        )
        assert r.status_code == 200
        assert r.json()["data"]["nombre_asignatura"] == "Geometría"
        assert r.json()["data"]["docente_id"] == datos.docente_1_id

    async def test_quitar_periodo(self, client, datos, admin, asignacion_valida):
        data = await crear(client, admin, asignacion_valida)
        r = await client.put(f"/asignaciones/{data['id']}", json={"periodo_id": None}, headers=admin)
        assert r.status_code == 200
        assert r.json()["data"]["periodo_id"] is None

    async def test_campo_obligatorio_nulo(self, client, datos, admin, asignacion_valida):
        data = await crear(client, admin, asignacion_valida)
        r = await client.put(f"/asignaciones/{data['id']}", json={"docente_id": None}, headers=admin)
        assert r.status_code == 422
        assert r.json()["errors"]["docente_id"] == ["El campo docente_id no puede ser nulo."]

    async def test_actualizar_inexistente(self, client, datos, admin):
        r = await client.put("/asignaciones/9999", json={"dia_semana": "lunes"}, headers=admin)
        assert r.status_code == 404


class TestEliminar:
    async def test_segundo_borrado_es_404(self, client, datos, admin, asignacion_valida):
        data = await crear(client, admin, asignacion_valida)
        r = await client.delete(f"/asignaciones/{data['id']}", headers=admin)
        assert r.status_code == 200
        assert r.json()["message"] == "Asignación eliminada exitosamente"

        r = await client.delete(f"/asignaciones/{data['id']}", headers=admin)
        assert r.status_code == 404
        assert r.json()["message"] == "Asignación no encontrada"

    async def test_borrar_libera_el_horario(self, client, datos, admin, asignacion_valida):
        data = await crear(client, admin, asignacion_valida)
        await client.delete(f"/asignaciones/{data['id']}", headers=admin)
        await crear(client, admin, asignacion_valida, grupo_id=datos.grupo_b_id)


# ─── LISTADOS Y HORARIOS ──────────────────────────────────────────────────────

class TestListados:
    async def test_filtros_combinados(self, client, datos, admin, asignacion_valida):
        await crear(client, admin, asignacion_valida)
        await crear(client, admin, asignacion_valida, dia_semana="martes", asignatura_id=datos.geometria_id)
        await crear(client, admin, asignacion_valida, docente_id=datos.docente_2_id, grupo_id=datos.grupo_b_id)

        r = await client.get("/asignaciones", params={"docente_id": datos.docente_1_id}, headers=admin)
        assert r.json()["meta"]["total"] == 2

        r = await client.get(
            "/asignaciones",
            params={"docente_id": datos.docente_1_id, "dia_semana": "martes"},
            headers=admin,
        )
        assert [a["nombre_asignatura"] for a in r.json()["data"]] == ["Geometría"]

        r = await client.get("/asignaciones", params={"institucion_id": datos.institucion_id}, headers=admin)
        assert r.json()["meta"]["total"] == 3

        r = await client.get("/asignaciones", params={"institucion_id": 9999}, headers=admin)
        assert r.json()["meta"]["total"] == 0

    async def test_busqueda_y_orden(self, client, datos, admin, asignacion_valida):
        await crear(client, admin, asignacion_valida, dia_semana="martes")
        await crear(client, admin, asignacion_valida, asignatura_id=datos.geometria_id)

        r = await client.get("/asignaciones", params={"search": "geo"}, headers=admin)
        assert [a["nombre_asignatura"] for a in r.json()["data"]] == ["Geometría"]

        r = await client.get("/asignaciones", params={"sort_by": "dia_semana"}, headers=admin)
        assert [a["dia_semana"] for a in r.json()["data"]] == ["lunes", "martes"]

        r = await client.get("/asignaciones", params={"sort_by": "clave"}, headers=admin)
        assert r.status_code == 422

    async def test_horario_de_grupo_ordenado(self, client, datos, admin, asignacion_valida):
        await crear(client, admin, asignacion_valida, dia_semana="martes")
        await crear(client, admin, asignacion_valida, franja_horaria_id=datos.franja_2_id)
        await crear(client, admin, asignacion_valida)
        await crear(client, admin, asignacion_valida, dia_semana="jueves", estado="inactivo")

        r = await client.get(f"/asignaciones/grupo/{datos.grupo_a_id}", headers=admin)
        assert r.status_code == 200
        horario = [(a["dia_semana"], a["franja_horaria_id"]) for a in r.json()["data"]]
        assert horario == [
            ("lunes", datos.franja_1_id),
            ("lunes", datos.franja_2_id),
            ("martes", datos.franja_1_id),
        ]

    async def test_horario_de_docente(self, client, datos, admin, asignacion_valida):
        await crear(client, admin, asignacion_valida)
        r = await client.get(f"/asignaciones/docente/{datos.docente_1_id}", headers=admin)
        assert len(r.json()["data"]) == 1
        r = await client.get(f"/asignaciones/docente/{datos.docente_2_id}", headers=admin)
        assert r.json()["data"] == []

    async def test_horario_de_inexistente(self, client, datos, admin):
        assert (await client.get("/asignaciones/grupo/9999", headers=admin)).status_code == 404
        assert (await client.get("/asignaciones/docente/9999", headers=admin)).status_code == 404

    async def test_auditoria_de_conflictos(self, client, engine, guardar, datos, admin, asignacion_valida):
        """Filas que chocan cargadas antes de existir el índice aparecen en /conflictos."""
        async with engine.begin() as conn:
            await conn.execute(text(f"DROP INDEX {INDICE_CONFLICTO_DOCENTE}"))
        await guardar(
            Asignacion(**asignacion_valida),
            Asignacion(**{**asignacion_valida, "grupo_id": datos.grupo_b_id}),
        )

        r = await client.get("/asignaciones/conflictos", headers=admin)
        assert r.status_code == 200
        cuerpo = r.json()
        assert len(cuerpo["conflictos_docente"]) == 2
        assert {c["tipo"] for c in cuerpo["conflictos_docente"]} == {"docente"}
        assert cuerpo["conflictos_grupo"] == []


# ─── IDEMPOTENCIA ─────────────────────────────────────────────────────────────

class TestIdempotencia:
    async def test_misma_clave_no_duplica(self, client, datos, admin, asignacion_valida):
        headers = {**admin, "Idempotency-Key": "intento-1"}
        primera = await client.post("/asignaciones", json=asignacion_valida, headers=headers)
        repetida = await client.post("/asignaciones", json=asignacion_valida, headers=headers)
        assert primera.status_code == repetida.status_code == 201
        assert repetida.json() == primera.json()

        r = await client.get("/asignaciones", headers=admin)
        assert r.json()["meta"]["total"] == 1

    async def test_sin_clave_el_reintento_es_conflicto(self, client, datos, admin, asignacion_valida):
        await crear(client, admin, asignacion_valida)
        r = await client.post("/asignaciones", json=asignacion_valida, headers=admin)
        assert r.status_code == 422
        assert r.json()["conflicto"] is True

    async def test_intento_rechazado_se_puede_reintentar(self, client, datos, admin, asignacion_valida):
        headers = {**admin, "Idempotency-Key": "intento-2"}
        r = await client.post("/asignaciones", json={**asignacion_valida, "docente_id": 9999}, headers=headers)
        assert r.status_code == 422
        r = await client.post("/asignaciones", json=asignacion_valida, headers=headers)
        assert r.status_code == 201


# ─── ERRORES INTERNOS ─────────────────────────────────────────────────────────

class TestErroresInternos:
    async def test_error_inesperado_es_500_generico(self, app, datos, admin, asignacion_valida, monkeypatch):
        async def falla(db, datos_asignacion):
            raise RuntimeError("detalle interno que no debe salir")

        monkeypatch.setattr(asignacion_service, "crear_asignacion", falla)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url=BASE_URL) as c:
            r = await c.post("/asignaciones", json=asignacion_valida, headers=admin)
        assert r.status_code == 500
        assert r.json() == {"message": MENSAJE_ERROR_INTERNO}


# ─── MODELOS DE RESPUESTA ─────────────────────────────────────────────────────

def esquema_200(openapi: dict, ruta: str, metodo: str, codigo: str = "200") -> str:
    return openapi["paths"][ruta][metodo]["responses"][codigo]["content"]["application/json"]["schema"]["$ref"]


class TestModelosDeRespuesta:
    async def test_openapi_documenta_los_modelos(self, client):
        openapi = (await client.get("http://test/openapi.json")).json()
        assert "AsignacionItem" in esquema_200(openapi, "/api/v1/asignaciones", "get")
        assert "Paginado" in esquema_200(openapi, "/api/v1/asignaciones", "get")
        assert "AsignacionItem" in esquema_200(openapi, "/api/v1/asignaciones", "post", "201")
        assert esquema_200(openapi, "/api/v1/login", "post").endswith("/LoginResponse")
        assert esquema_200(openapi, "/api/v1/asignaciones/conflictos", "get").endswith("/ConflictosResponse")

        esquemas = openapi["components"]["schemas"]
        assert {"from", "to"} <= set(esquemas["MetaPaginacion"]["properties"])
        assert esquemas["FranjaHorariaItem"]["properties"]["hora_inicio"]["type"] == "string"

    async def test_sobre_paginado(self, client, datos, admin, asignacion_valida):
        await crear(client, admin, asignacion_valida)
        cuerpo = (await client.get("/asignaciones", headers=admin)).json()
        assert set(cuerpo) == {"data", "meta", "links"}
        assert cuerpo["meta"] == {
            "current_page": 1,
            "last_page": 1,
            "per_page": cuerpo["meta"]["per_page"],
            "total": 1,
            "from": 1,
            "to": 1,
        }
        assert set(cuerpo["links"]) == {"first", "last", "prev", "next"}
        assert cuerpo["links"]["prev"] is None

    async def test_relaciones_no_cargadas_se_omiten(self, client, datos, admin, asignacion_valida):
        creada = await crear(client, admin, asignacion_valida)
        data = (await client.get(f"/asignaciones/{creada['id']}", headers=admin)).json()["data"]

        assert data["grupo"]["grado"]["nombre"] == "Sexto"
        assert "director_docente" not in data["grupo"]
        assert "anio" not in data["grupo"]
        assert data["grupo"]["estudiantes_count"] is None
        assert "institucion" not in data["docente"]["user"]
        assert data["docente"]["user"]["roles"] == []
        assert "password_hash" not in data["docente"]["user"]
        assert data["created_at"]
        assert (data["franja_horaria"]["hora_inicio"], data["franja_horaria"]["hora_fin"]) == ("07:00", "07:45")

    async def test_conflicto_con_fechas_serializadas(self, client, datos, admin, asignacion_valida):
        primera = await crear(client, admin, asignacion_valida)
        r = await client.post(
            "/asignaciones", json={**asignacion_valida, "grupo_id": datos.grupo_b_id}, headers=admin
        )
        conflictiva = r.json()["asignacion_conflictiva"]
        assert conflictiva["id"] == primera["id"]
        assert isinstance(conflictiva["created_at"], str)
        assert conflictiva["franja_horaria"]["hora_inicio"] == "07:00"
