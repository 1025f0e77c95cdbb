"""Tests del cliente: sesión, envoltura HTTP, carga de referencias y formulario.

Se usa ``httpx.MockTransport``; ninguna prueba abre conexiones reales.
"""
import asyncio
import json

import httpx
import pytest

from kampus.cliente import (
    CargadorPeriodos,
    ClienteApi,
    ErrorApi,
    FormularioAsignacion,
    Sesion,
    cargar_referencias,
)
from kampus.cliente.formulario import CAMPO_OBLIGATORIO, ERROR_CARGANDO, FALTAN_CAMPOS
from kampus.cliente.http import ERROR_CONEXION, SIN_RESPUESTA

API = "http://api.test/api/v1"
PREFIJO = "/api/v1"


def cliente_con(handler, token: str | None = "token-1") -> ClienteApi:
    return ClienteApi(Sesion(token=token), base_url=API, transport=httpx.MockTransport(handler))


def ruta(request: httpx.Request) -> str:
    return request.url.path.removeprefix(PREFIJO)


def borrador_completo() -> dict:
    return {
        "docente_id": 1,
        "asignatura_id": 2,
        "grupo_id": 3,
        "franja_horaria_id": 4,
        "dia_semana": "lunes",
        "anio_academico_id": 5,
    }


# ─── SESIÓN ───────────────────────────────────────────────────────────────────

class TestSesion:
    def test_tiene_permiso(self):
        sesion = Sesion(
            "t",
            {"roles": [{"nombre": "Docente", "permissions": [{"nombre": "ver_asignaciones"}]}]},
        )
        assert sesion.autenticada
        assert sesion.tiene_permiso("ver_asignaciones")
        assert not sesion.tiene_permiso("crear_asignaciones")

    def test_cerrar(self):
        sesion = Sesion("t", {"roles": []})
        sesion.cerrar()
        assert not sesion.autenticada
        assert not sesion.tiene_permiso("ver_asignaciones")


# ─── HTTP ─────────────────────────────────────────────────────────────────────

class TestClienteApi:
    async def test_envia_bearer(self):
        vistos = []

        def handler(request):
            vistos.append(request.headers.get("Authorization"))
            return httpx.Response(200, json={"data": []})

        async with cliente_con(handler) as cliente:
            await cliente.get("/asignaciones")
        assert vistos == ["Bearer token-1"]

    async def test_sin_sesion_no_envia_authorization(self):
        def handler(request):
            assert "Authorization" not in request.headers
            return httpx.Response(200, json={})

        async with cliente_con(handler, token=None) as cliente:
            await cliente.get("/asignaciones")

    async def test_reemplaza_token_con_x_new_token(self):
        vistos = []

        def handler(request):
            vistos.append(request.headers["Authorization"])
            return httpx.Response(200, json={"data": []}, headers={"X-New-Token": "token-2"})

        async with cliente_con(handler) as cliente:
            await cliente.get("/asignaciones")
            await cliente.get("/asignaciones")
            assert cliente.sesion.token == "token-2"
        assert vistos == ["Bearer token-1", "Bearer token-2"]

    async def test_token_renovado_en_respuesta_de_error(self):
        def handler(request):
            return httpx.Response(403, json={"message": "No tienes permisos"}, headers={"X-New-Token": "token-2"})

        async with cliente_con(handler) as cliente:
            with pytest.raises(ErrorApi):
                await cliente.get("/roles")
            assert cliente.sesion.token == "token-2"

    async def test_401_cierra_la_sesion(self):
        llamadas = []

        def handler(request):
            llamadas.append(request)
            return httpx.Response(401, json={"message": "Usuario no autenticado"})

        async with cliente_con(handler) as cliente:
            with pytest.raises(ErrorApi) as exc:
                await cliente.get("/me")
            assert not cliente.sesion.autenticada
        assert exc.value.status == 401
        assert exc.value.message == "Usuario no autenticado"
        assert len(llamadas) == 1

    async def test_timeout_da_mensaje_generico(self):
        def handler(request):
            raise httpx.ReadTimeout("timeout", request=request)

        async with cliente_con(handler) as cliente:
            with pytest.raises(ErrorApi) as exc:
                await cliente.get("/asignaciones")
            assert cliente.sesion.autenticada
        assert exc.value.message == SIN_RESPUESTA
        assert exc.value.status is None

    async def test_error_de_red(self):
        def handler(request):
            raise httpx.ConnectError("rechazada", request=request)

        async with cliente_con(handler) as cliente:
            with pytest.raises(ErrorApi) as exc:
                await cliente.get("/asignaciones")
        assert exc.value.message == SIN_RESPUESTA

    @pytest.mark.parametrize(
        "cuerpo,esperado",
        [
            ({"message": "Asignación no encontrada"}, "Asignación no encontrada"),
            ({"error": "Token inválido"}, "Token inválido"),
            ({}, ERROR_CONEXION),
        ],
    )
    async def test_mensaje_de_error(self, cuerpo, esperado):
        async with cliente_con(lambda request: httpx.Response(404, json=cuerpo)) as cliente:
            with pytest.raises(ErrorApi) as exc:
                await cliente.get("/asignaciones/9")
        assert exc.value.message == esperado

    async def test_cuerpo_que_no_es_json(self):
        async with cliente_con(lambda request: httpx.Response(502, text="Bad Gateway")) as cliente:
            with pytest.raises(ErrorApi) as exc:
                await cliente.get("/asignaciones")
        assert exc.value.status == 502
        assert exc.value.message == ERROR_CONEXION

    async def test_login_y_logout(self):
        def handler(request):
            if ruta(request) == "/login":
                return httpx.Response(200, json={"token": "nuevo", "user": {"id": 1, "roles": []}})
            return httpx.Response(500, json={"message": "falló"})

        async with cliente_con(handler, token=None) as cliente:
            usuario = await cliente.login("admin@example.com", "secreto123")
            assert usuario["id"] == 1
            assert cliente.sesion.token == "nuevo"
            with pytest.raises(ErrorApi):
                await cliente.logout()
            assert not cliente.sesion.autenticada


# ─── REFERENCIAS Y PERIODOS ───────────────────────────────────────────────────

class TestReferencias:
    async def test_carga_las_cinco_listas_en_paralelo(self):
        llegadas = []
        todas = asyncio.Event()

        async def handler(request):
            llegadas.append((ruta(request), request.url.params["per_page"]))
            if len(llegadas) == 5:
                todas.set()
            await asyncio.wait_for(todas.wait(), timeout=2)
            return httpx.Response(200, json={"data": [{"id": 1, "ruta": ruta(request)}]})

        async with cliente_con(handler) as cliente:
            referencias = await cargar_referencias(cliente, per_page=50)

        assert sorted(llegadas) == sorted(
            (r, "50") for r in ("/docentes", "/asignaturas", "/grupos", "/franjas-horarias", "/anios")
        )
        assert referencias.franjas_horarias == [{"id": 1, "ruta": "/franjas-horarias"}]
        assert referencias.buscar("docentes", 1)["ruta"] == "/docentes"
        assert referencias.buscar("docentes", 2) is None
        assert referencias.buscar("docentes", None) is None

    async def test_lista_sin_data_queda_vacia(self):
        async with cliente_con(lambda request: httpx.Response(200, json={})) as cliente:
            referencias = await cargar_referencias(cliente)
        assert referencias.anios == []


class TestCargadorPeriodos:
    async def test_respuesta_tardia_se_descarta(self):
        recibida = asyncio.Event()
        liberar = asyncio.Event()

        async def handler(request):
            if ruta(request) == "/anios/1/periodos":
                recibida.set()
                await liberar.wait()
                return httpx.Response(200, json={"data": [{"id": 10, "anio_id": 1}]})
            return httpx.Response(200, json={"data": [{"id": 20, "anio_id": 2}]})

        async with cliente_con(handler) as cliente:
            cargador = CargadorPeriodos(cliente)
            primera = asyncio.create_task(cargador.seleccionar(1))
            await recibida.wait()
            assert await cargador.seleccionar(2) is True
            liberar.set()
            assert await primera is False

        assert cargador.anio_id == 2
        assert cargador.periodos == [{"id": 20, "anio_id": 2}]

    async def test_error_tardio_se_descarta(self):
        recibida = asyncio.Event()
        liberar = asyncio.Event()

        async def handler(request):
            if ruta(request) == "/anios/1/periodos":
                recibida.set()
                await liberar.wait()
                return httpx.Response(500, json={"message": "falló"})
            return httpx.Response(200, json={"data": [{"id": 20}]})

        async with cliente_con(handler) as cliente:
            cargador = CargadorPeriodos(cliente)
            primera = asyncio.create_task(cargador.seleccionar(1))
            await recibida.wait()
            await cargador.seleccionar(2)
            liberar.set()
            assert await primera is False
        assert cargador.periodos == [{"id": 20}]

    async def test_error_vigente_vacia_la_lista(self):
        async with cliente_con(lambda request: httpx.Response(404, json={"message": "no"})) as cliente:
            cargador = CargadorPeriodos(cliente)
            cargador.periodos = [{"id": 1}]
            with pytest.raises(ErrorApi):
                await cargador.seleccionar(9)
        assert cargador.periodos == []

    async def test_sin_anio_no_pide_nada(self):
        def handler(request):
            raise AssertionError("no debería haber petición")

        async with cliente_con(handler) as cliente:
            cargador = CargadorPeriodos(cliente)
            cargador.periodos = [{"id": 1}]
            assert await cargador.seleccionar(None) is True
        assert cargador.periodos == []


# ─── FORMULARIO ───────────────────────────────────────────────────────────────

class TestFormularioAsignacion:
    async def test_validacion_local_sin_peticion(self):
        def handler(request):
            raise AssertionError("no debería haber petición")

        async with cliente_con(handler) as cliente:
            form = FormularioAsignacion(cliente)
            form.actualizar(docente_id=1)
            assert await form.enviar() is None
        assert form.error == FALTAN_CAMPOS
        assert form.errores["grupo_id"] == [CAMPO_OBLIGATORIO]
        assert "docente_id" not in form.errores

    async def test_campo_desconocido(self):
        async with cliente_con(lambda request: httpx.Response(200, json={})) as cliente:
            form = FormularioAsignacion(cliente)
            with pytest.raises(KeyError):
                form.actualizar(aula_id=3)

    async def test_conflicto_conserva_el_borrador(self):
        def handler(request):
            return httpx.Response(
                422,
                json={
                    "message": "El docente ya tiene una asignación en esa franja.",
                    "conflicto": True,
                    "tipo_conflicto": "docente",
                },
            )

        completadas = []
        async with cliente_con(handler) as cliente:
            form = FormularioAsignacion(cliente, al_completar=completadas.append)
            form.actualizar(**borrador_completo())
            assert await form.enviar() is None

        assert form.error == "Conflicto de horario: El docente ya tiene una asignación en esa franja."
        assert form.borrador["docente_id"] == 1
        assert form.borrador["dia_semana"] == "lunes"
        assert completadas == []
        assert form.enviando is False

    async def test_errores_por_campo_del_servidor(self):
        def handler(request):
            return httpx.Response(
                422,
                json={"message": "El grupo no existe.", "errors": {"grupo_id": ["El grupo no existe."], "otro": ["x"]}},
            )

        async with cliente_con(handler) as cliente:
            form = FormularioAsignacion(cliente)
            form.actualizar(**borrador_completo())
            await form.enviar()
        assert form.error == "El grupo no existe."
        assert form.errores == {"grupo_id": ["El grupo no existe."]}

    async def test_reenvio_reutiliza_idempotency_key(self):
        claves = []

        def handler(request):
            claves.append(request.headers.get("Idempotency-Key"))
            if len(claves) == 1:
                raise httpx.ReadTimeout("timeout", request=request)
            return httpx.Response(201, json={"data": {"id": 99, **json.loads(request.content)}})

        async with cliente_con(handler) as cliente:
            form = FormularioAsignacion(cliente)
            form.actualizar(**borrador_completo())
            assert await form.enviar() is None
            assert form.error == SIN_RESPUESTA
            guardada = await form.enviar()

        assert guardada["id"] == 99
        assert claves[0] is not None
        assert claves[0] == claves[1]
        assert form.error is None

    async def test_cambiar_el_borrador_renueva_la_clave(self):
        claves = []

        def handler(request):
            claves.append(request.headers.get("Idempotency-Key"))
            return httpx.Response(500, json={"message": "falló"})

        async with cliente_con(handler) as cliente:
            form = FormularioAsignacion(cliente)
            form.actualizar(**borrador_completo())
            await form.enviar()
            form.actualizar(dia_semana="martes")
            await form.enviar()
        assert claves[0] != claves[1]

    async def test_exito_invoca_al_completar(self):
        def handler(request):
            cuerpo = json.loads(request.content)
            return httpx.Response(201, json={"data": {"id": 7, **cuerpo}})

        completadas = []

        async def al_completar(asignacion):
            completadas.append(asignacion)

        async with cliente_con(handler) as cliente:
            form = FormularioAsignacion(cliente, al_completar=al_completar)
            form.actualizar(**borrador_completo())
            guardada = await form.enviar()

        assert completadas == [guardada]
        assert guardada["estado"] == "activo"

    async def test_edicion_usa_put(self):
        metodos = []

        def handler(request):
            metodos.append((request.method, ruta(request), "Idempotency-Key" in request.headers))
            return httpx.Response(200, json={"data": {"id": 7}})

        async with cliente_con(handler) as cliente:
            form = FormularioAsignacion(cliente, asignacion={"id": 7, **borrador_completo()})
            assert form.editando
            form.actualizar(dia_semana="viernes")
            await form.enviar()
        assert metodos == [("PUT", "/asignaciones/7", False)]

    async def test_cambiar_anio_quita_el_periodo(self):
        def handler(request):
            if ruta(request) == "/anios/6/periodos":
                return httpx.Response(200, json={"data": [{"id": 61, "nombre": "Primer periodo"}]})
            return httpx.Response(200, json={"data": [{"id": 5, "nombre": "2025"}]})

        async with cliente_con(handler) as cliente:
            form = FormularioAsignacion(cliente, asignacion={"id": 1, **borrador_completo(), "periodo_id": 50})
            await form.cargar()
            await form.cambiar_anio(6)
            form.actualizar(periodo_id=61)
            vista = form.vista_previa()

        assert form.borrador["anio_academico_id"] == 6
        assert vista["periodo"] == {"id": 61, "nombre": "Primer periodo"}
        assert vista["anio_academico"] is None
        assert vista["grupo"] is None

    async def test_fallo_de_carga_deja_mensaje_y_pide_periodos(self):
        pedidas = []

        def handler(request):
            pedidas.append(ruta(request))
            if ruta(request) == "/grupos":
                return httpx.Response(500, json={"message": "falló"})
            if ruta(request) == "/anios/5/periodos":
                return httpx.Response(200, json={"data": [{"id": 51, "nombre": "Primer periodo"}]})
            return httpx.Response(200, json={"data": [{"id": 1}]})

        async with cliente_con(handler) as cliente:
            form = FormularioAsignacion(cliente, asignacion={"id": 1, **borrador_completo()})
            await form.cargar()

        assert form.error == ERROR_CARGANDO
        assert form.referencias.grupos == []
        assert "/anios/5/periodos" in pedidas
        assert form.periodos.periodos == [{"id": 51, "nombre": "Primer periodo"}]
        assert form.borrador["docente_id"] == 1

    async def test_fallo_de_periodos_deja_mensaje(self):
        def handler(request):
            if ruta(request) == "/anios/5/periodos":
                return httpx.Response(404, json={"message": "Año no encontrado"})
            return httpx.Response(200, json={"data": []})

        async with cliente_con(handler) as cliente:
            form = FormularioAsignacion(cliente, asignacion={"id": 1, **borrador_completo()})
            await form.cargar()
        assert form.error == ERROR_CARGANDO
        assert form.periodos.periodos == []

    async def test_doble_envio_hace_una_sola_peticion(self):
        recibida = asyncio.Event()
        liberar = asyncio.Event()
        posts = []

        async def handler(request):
            posts.append(request)
            recibida.set()
            await liberar.wait()
            return httpx.Response(201, json={"data": {"id": 7, **json.loads(request.content)}})

        completadas = []
        async with cliente_con(handler) as cliente:
            form = FormularioAsignacion(cliente, al_completar=completadas.append)
            form.actualizar(**borrador_completo())
            primero = asyncio.create_task(form.enviar())
            await recibida.wait()
            assert form.enviando is True
            assert await form.enviar() is None
            liberar.set()
            guardada = await primero

        assert len(posts) == 1
        assert guardada["id"] == 7
        assert completadas == [guardada]
        assert form.enviando is False

    async def test_envios_simultaneos(self):
        posts = []

        async def handler(request):
            posts.append(request)
            await asyncio.sleep(0)
            return httpx.Response(201, json={"data": {"id": 8}})

        async with cliente_con(handler) as cliente:
            form = FormularioAsignacion(cliente)
            form.actualizar(**borrador_completo())
            resultados = await asyncio.gather(form.enviar(), form.enviar())

        assert len(posts) == 1
        assert resultados == [{"id": 8}, None]
