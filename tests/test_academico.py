"""Tests de la estructura académica y de personas: periodos, franjas, grupos,
grados, instituciones, docentes y estudiantes."""
import pytest

from tests.conftest import PASSWORD


def datos_persona(datos, username: str, **extra) -> dict:
    return {
        "nombre": username.capitalize(),
        "apellido": "Nuevo",
        "email": f"{username}@example.com",
        "username": username,
        "password": PASSWORD,
        "institucion_id": datos.institucion_id,
        **extra,
    }


@pytest.fixture
async def estudiante(client, datos, admin):
    r = await client.post(
        "/estudiantes",
        json=datos_persona(datos, "sofia", codigo_estudiantil="E-001", grupo_id=datos.grupo_a_id, genero="F"),
        headers=admin,
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]


# ─── AÑOS Y PERIODOS ──────────────────────────────────────────────────────────

class TestPeriodos:
    async def test_periodos_del_anio(self, client, datos, admin):
        r = await client.get(f"/anios/{datos.anio_id}/periodos", headers=admin)
        assert r.status_code == 200
        assert [p["id"] for p in r.json()["data"]] == [datos.periodo_id]

    async def test_crear_periodo(self, client, datos, admin):
        r = await client.post(
            f"/anios/{datos.anio_id}/periodos",
            json={"nombre": "Segundo periodo", "fecha_inicio": "2025-04-21", "fecha_fin": "2025-06-20"},
            headers=admin,
        )
        assert r.status_code == 201
        assert r.json()["data"]["anio_id"] == datos.anio_id

    async def test_fechas_invertidas(self, client, datos, admin):
        r = await client.post(
            f"/anios/{datos.anio_id}/periodos",
            json={"nombre": "Mal", "fecha_inicio": "2025-06-20", "fecha_fin": "2025-04-21"},
            headers=admin,
        )
        assert r.status_code == 422

    async def test_periodo_de_otro_anio_es_404(self, client, datos, admin):
        ruta = f"/anios/{datos.anio_id}/periodos/{datos.periodo_otro_anio_id}"
        assert (await client.get(ruta, headers=admin)).status_code == 404
        assert (await client.delete(ruta, headers=admin)).status_code == 404

    async def test_anio_inexistente(self, client, datos, admin):
        assert (await client.get("/anios/9999/periodos", headers=admin)).status_code == 404

    async def test_nombre_de_anio_unico(self, client, datos, admin):
        r = await client.post(
            "/anios",
            json={
                "nombre": "2025",
                "fecha_inicio": "2025-01-01",
                "fecha_fin": "2025-12-01",
                "institucion_id": datos.institucion_id,
            },
            headers=admin,
        )
        assert r.status_code == 422
        assert "nombre" in r.json()["errors"]

    async def test_crear_anio(self, client, datos, admin):
        r = await client.post(
            "/anios",
            json={
                "nombre": "2024-2025",
                "fecha_inicio": "2024-02-01",
                "fecha_fin": "2024-11-30",
                "institucion_id": datos.institucion_id,
                "estado": "activo",
            },
            headers=admin,
        )
        assert r.status_code == 201, r.text
        anio = r.json()["data"]
        assert anio["nombre"] == "2024-2025"
        assert anio["fecha_inicio"] == "2024-02-01"
        assert anio["estado"] == "activo"
        assert anio["institucion"]["id"] == datos.institucion_id
        assert anio["periodos"] == []

        r = await client.get(f"/anios/{anio['id']}", headers=admin)
        assert r.json()["data"]["nombre"] == "2024-2025"


# ─── FRANJAS HORARIAS ─────────────────────────────────────────────────────────

class TestFranjasHorarias:
    async def test_anidadas_bajo_la_institucion(self, client, datos, admin):
        base = f"/instituciones/{datos.institucion_id}/franjas-horarias"
        r = await client.post(
            base, json={"nombre": "Tercera hora", "hora_inicio": "08:30", "hora_fin": "09:15"}, headers=admin
        )
        assert r.status_code == 201
        franja = r.json()["data"]
        assert franja["institucion_id"] == datos.institucion_id
        assert franja["duracion_minutos"] == 45

        r = await client.get(base, headers=admin)
        assert r.json()["meta"]["total"] == 3
        assert (await client.get(f"{base}/{franja['id']}", headers=admin)).status_code == 200

    async def test_franja_de_otra_institucion_es_404(self, client, datos, admin):
        r = await client.post("/instituciones", json={"nombre": "Otro Colegio"}, headers=admin)
        otra = r.json()["data"]["id"]
        r = await client.get(f"/instituciones/{otra}/franjas-horarias/{datos.franja_1_id}", headers=admin)
        assert r.status_code == 404
        assert r.json()["message"] == "Franja horaria no encontrada en esta institución"

    async def test_horario_repetido(self, client, datos, admin):
        r = await client.post(
            "/franjas-horarias",
            json={
                "nombre": "Duplicada",
                "hora_inicio": "07:00",
                "hora_fin": "07:45",
                "institucion_id": datos.institucion_id,
            },
            headers=admin,
        )
        assert r.status_code == 422
        assert r.json()["errors"]["hora_inicio"] == [
            "Ya existe una franja horaria con ese horario en la institución."
        ]

    async def test_hora_fin_anterior(self, client, datos, admin):
        r = await client.put(
            f"/franjas-horarias/{datos.franja_1_id}", json={"hora_fin": "06:00"}, headers=admin
        )
        assert r.status_code == 422


# ─── GRUPOS ───────────────────────────────────────────────────────────────────

class TestGrupos:
    async def test_trasladar_estudiante(self, client, datos, admin, estudiante):
        r = await client.put(
            f"/grupos/{datos.grupo_a_id}/estudiantes/{estudiante['id']}/trasladar",
            json={"grupo_destino_id": datos.grupo_b_id},
            headers=admin,
        )
        assert r.status_code == 200
        assert r.json()["grupo_destino_id"] == datos.grupo_b_id

        r = await client.get(f"/estudiantes/{estudiante['id']}", headers=admin)
        assert r.json()["data"]["grupo_id"] == datos.grupo_b_id

    async def test_trasladar_al_mismo_grupo(self, client, datos, admin, estudiante):
        r = await client.put(
            f"/grupos/{datos.grupo_a_id}/estudiantes/{estudiante['id']}/trasladar",
            json={"grupo_destino_id": datos.grupo_a_id},
            headers=admin,
        )
        assert r.status_code == 422
        assert r.json()["message"] == "El grupo destino no puede ser el mismo grupo de origen"

    async def test_trasladar_estudiante_de_otro_grupo(self, client, datos, admin, estudiante):
        r = await client.put(
            f"/grupos/{datos.grupo_b_id}/estudiantes/{estudiante['id']}/trasladar",
            json={"grupo_destino_id": datos.grupo_a_id},
            headers=admin,
        )
        assert r.status_code == 404

    async def test_desvincular(self, client, datos, admin, estudiante):
        ruta = f"/grupos/{datos.grupo_a_id}/estudiantes/{estudiante['id']}"
        r = await client.delete(ruta, headers=admin)
        assert r.status_code == 200
        assert (await client.delete(ruta, headers=admin)).status_code == 404

    async def test_detalle_con_estudiantes(self, client, datos, admin, estudiante):
        r = await client.get(f"/grupos/{datos.grupo_a_id}", headers=admin)
        grupo = r.json()["data"]
        assert grupo["estudiantes_count"] == 1
        assert grupo["estudiantes"][0]["id"] == estudiante["id"]

    async def test_orden_por_relacion(self, client, datos, admin):
        r = await client.get("/grupos", params={"sort_by": "grado.nombre"}, headers=admin)
        assert r.status_code == 200

    async def test_referencia_inexistente(self, client, datos, admin):
        r = await client.post(
            "/grupos",
            json={"nombre": "6-C", "sede_id": 9999, "anio_id": datos.anio_id, "grado_id": datos.grado_id},
            headers=admin,
        )
        assert r.status_code == 422
        assert "sede_id" in r.json()["errors"]


# ─── GRADOS E INSTITUCIONES ───────────────────────────────────────────────────

class TestGradosEInstituciones:
    async def test_niveles(self, client, datos, admin):
        r = await client.get("/grados/niveles", headers=admin)
        assert r.json()["data"] == ["Preescolar", "Básica Primaria", "Básica Secundaria", "Educación Media"]

    async def test_nivel_invalido(self, client, datos, admin):
        r = await client.post(
            "/grados", json={"nombre": "Raro", "nivel": "Doctorado", "institucion_id": datos.institucion_id},
            headers=admin,
        )
        assert r.status_code == 422
        assert "nivel" in r.json()["errors"]

    async def test_grado_repetido_en_la_institucion(self, client, datos, admin):
        r = await client.post(
            "/grados",
            json={"nombre": "Sexto", "nivel": "Básica Secundaria", "institucion_id": datos.institucion_id},
            headers=admin,
        )
        assert r.status_code == 422

    async def test_sedes_de_la_institucion(self, client, datos, admin):
        r = await client.get(f"/instituciones/{datos.institucion_id}/sedes", headers=admin)
        assert [s["id"] for s in r.json()["data"]] == [datos.sede_id]

    async def test_eliminar_institucion_en_cascada(self, client, datos, admin):
        r = await client.post("/instituciones", json={"nombre": "Temporal"}, headers=admin)
        institucion_id = r.json()["data"]["id"]
        r = await client.post(
            "/sedes",
            json={"nombre": "Única", "direccion": "Calle 1 # 2-3", "institucion_id": institucion_id},
            headers=admin,
        )
        sede_id = r.json()["data"]["id"]

        r = await client.delete(f"/instituciones/{institucion_id}", headers=admin)
        assert r.status_code == 200
        assert (await client.get(f"/sedes/{sede_id}", headers=admin)).status_code == 404


# ─── DOCENTES Y ESTUDIANTES ───────────────────────────────────────────────────

class TestPersonas:
    async def test_crear_docente_con_su_usuario(self, client, datos, admin):
        r = await client.post(
            "/docentes", json=datos_persona(datos, "mario", especialidad="Historia"), headers=admin
        )
        assert r.status_code == 201
        docente = r.json()["data"]
        assert docente["nombre"] == "Mario"
        assert docente["especialidad"] == "Historia"
        assert docente["institucion"]["id"] == datos.institucion_id

        r = await client.get(f"/users/{docente['user_id']}/roles", headers=admin)
        assert [rol["nombre"] for rol in r.json()["data"]] == ["Docente"]

    async def test_eliminar_docente_elimina_su_usuario(self, client, datos, admin):
        r = await client.post("/docentes", json=datos_persona(datos, "elena"), headers=admin)
        docente = r.json()["data"]
        assert (await client.delete(f"/docentes/{docente['id']}", headers=admin)).status_code == 200
        assert (await client.get(f"/users/{docente['user_id']}", headers=admin)).status_code == 404

    async def test_disponibles_para_dirigir_grupo(self, client, datos, admin):
        r = await client.put(
            f"/grupos/{datos.grupo_a_id}", json={"director_docente_id": datos.docente_1_id}, headers=admin
        )
        assert r.status_code == 200

        r = await client.get("/docentes/disponibles-grupo", headers=admin)
        assert [d["id"] for d in r.json()["data"]] == [datos.docente_2_id]

        r = await client.get(
            "/docentes/disponibles-grupo", params={"grupo_id": datos.grupo_a_id}, headers=admin
        )
        assert {d["id"] for d in r.json()["data"]} == {datos.docente_1_id, datos.docente_2_id}

    async def test_estudiante_con_acudientes(self, client, datos, admin):
        r = await client.post("/acudientes", json={"nombre": "Marta Díaz", "telefono": "3001234567"}, headers=admin)
        acudiente_id = r.json()["data"]["id"]

        r = await client.post(
            "/estudiantes",
            json=datos_persona(
                datos,
                "tomas",
                codigo_estudiantil="E-002",
                acudientes=[{"acudiente_id": acudiente_id, "parentesco": "Madre"}],
            ),
            headers=admin,
        )
        assert r.status_code == 201
        estudiante = r.json()["data"]
        assert [a["nombre"] for a in estudiante["acudientes"]] == ["Marta Díaz"]
        assert estudiante["institucion_id"] == datos.institucion_id

    async def test_acudiente_inexistente(self, client, datos, admin):
        r = await client.post(
            "/estudiantes",
            json=datos_persona(datos, "ines", codigo_estudiantil="E-003", acudientes=[{"acudiente_id": 9999}]),
            headers=admin,
        )
        assert r.status_code == 422
        assert r.json()["errors"]["acudientes"] == ["El acudiente 9999 no existe."]

    async def test_codigo_estudiantil_unico(self, client, datos, admin, estudiante):
        r = await client.post(
            "/estudiantes", json=datos_persona(datos, "pablo", codigo_estudiantil="E-001"), headers=admin
        )
        assert r.status_code == 422
        assert r.json()["errors"]["codigo_estudiantil"] == ["El código estudiantil ya está en uso."]

    async def test_filtrar_estudiantes_por_grupo(self, client, datos, admin, estudiante):
        r = await client.get("/estudiantes", params={"grupo_id": datos.grupo_a_id}, headers=admin)
        assert [e["id"] for e in r.json()["data"]] == [estudiante["id"]]
        r = await client.get("/estudiantes", params={"grupo_id": datos.grupo_b_id}, headers=admin)
        assert r.json()["data"] == []
