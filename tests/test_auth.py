"""Tests de login, logout, /me, verificación y renovación del token."""
from datetime import datetime, timedelta, timezone

import jwt

from kampus.api.endpoints.auth import leer_token
from kampus.core.config import settings
from kampus.core.security import create_access_token
from kampus.models import TokenAcceso

from tests.conftest import PASSWORD, auth


async def token_por_vencer(sesiones, user_id: int, minutos: int = 5) -> str:
    """Token registrado al que le quedan pocos minutos (dispara la renovación)."""
    token, jti, expira = create_access_token(user_id, expire_minutes=minutos)
    async with sesiones() as s:
        s.add(TokenAcceso(user_id=user_id, jti=jti, expira_en=expira))
        await s.commit()
    return token


# ─── LOGIN ────────────────────────────────────────────────────────────────────

class TestLogin:
    async def test_login_correcto(self, client, datos):
        """Credenciales válidas devuelven token y usuario con roles y permisos."""
        r = await client.post("/login", json={"email": "admin@example.com", "password": PASSWORD})
        assert r.status_code == 200
        cuerpo = r.json()
        assert cuerpo["token"]
        assert cuerpo["user"]["email"] == "admin@example.com"
        assert cuerpo["user"]["roles"][0]["nombre"] == "Administrador"
        assert cuerpo["user"]["roles"][0]["permissions"]
        assert cuerpo["user"]["institucion"]["nombre"] == "Colegio Central"

    async def test_login_incorrecto_sin_token(self, client, datos):
        """Contraseña errónea: 422 con el mensaje fijo y sin token."""
        r = await client.post("/login", json={"email": "admin@example.com", "password": "otra-clave"})
        assert r.status_code == 422
        cuerpo = r.json()
        assert cuerpo["message"] == "Las credenciales proporcionadas son incorrectas."
        assert "token" not in cuerpo

    async def test_login_email_inexistente(self, client, datos):
        r = await client.post("/login", json={"email": "nadie@example.com", "password": PASSWORD})
        assert r.status_code == 422
        assert "token" not in r.json()

    async def test_login_datos_invalidos(self, client, datos):
        """Un email mal formado es un error de validación por campo."""
        r = await client.post("/login", json={"email": "no-es-email", "password": PASSWORD})
        assert r.status_code == 422
        assert "email" in r.json()["errors"]

    async def test_login_revoca_tokens_anteriores(self, client, datos):
        anterior = datos.tokens["admin"]
        r = await client.post("/login", json={"email": "admin@example.com", "password": PASSWORD})
        assert r.status_code == 200

        assert (await client.get("/me", headers=auth(anterior))).status_code == 401
        assert (await client.get("/me", headers=auth(r.json()["token"]))).status_code == 200


# ─── SESIÓN ───────────────────────────────────────────────────────────────────

class TestSesion:
    async def test_me_sin_token(self, client, datos):
        r = await client.get("/me")
        assert r.status_code == 401
        assert r.json()["message"] == "Usuario no autenticado"

    async def test_me_token_invalido(self, client, datos):
        r = await client.get("/me", headers=auth("token.que.no.vale"))
        assert r.status_code == 401

    async def test_me(self, client, datos, lector):
        r = await client.get("/me", headers=lector)
        assert r.status_code == 200
        usuario = r.json()["user"]
        assert usuario["id"] == datos.lector_id
        assert [rol["nombre"] for rol in usuario["roles"]] == ["Docente"]

    async def test_logout_revoca_solo_el_token_actual(self, client, datos, admin):
        otro = await client.post("/login", json={"email": "lector@example.com", "password": PASSWORD})
        r = await client.post("/logout", headers=admin)
        assert r.status_code == 200

        assert (await client.get("/me", headers=admin)).status_code == 401
        assert (await client.get("/me", headers=auth(otro.json()["token"]))).status_code == 200

    async def test_logout_sin_token(self, client, datos):
        assert (await client.post("/logout")).status_code == 401

    async def test_verify_token(self, client, datos, admin):
        r = await client.get("/verify-token", headers=admin)
        assert r.status_code == 200
        cuerpo = r.json()
        assert cuerpo["valid"] is True
        assert cuerpo["should_refresh"] is False
        assert cuerpo["new_token"] is None
        assert cuerpo["expires_at"]


    async def test_expires_at_coincide_con_el_token(self, client, datos, admin):
        r = await client.get("/verify-token", headers=admin)
        expira = datetime.fromisoformat(r.json()["expires_at"].replace("Z", "+00:00"))
        assert expira.timestamp() == leer_token(datos.tokens["admin"]).exp

# ─── RENOVACIÓN ───────────────────────────────────────────────────────────────

class TestRenovacionToken:
    async def test_token_por_vencer_se_renueva(self, client, sesiones, datos):
        """Al token le quedan menos minutos que la ventana: llega X-New-Token."""
        viejo = await token_por_vencer(sesiones, datos.admin_id)
        r = await client.get("/me", headers=auth(viejo))
        assert r.status_code == 200
        nuevo = r.headers.get("X-New-Token")
        assert nuevo and nuevo != viejo

        assert (await client.get("/me", headers=auth(nuevo))).status_code == 200
        assert (await client.get("/me", headers=auth(viejo))).status_code == 401

    async def test_token_con_tiempo_no_se_renueva(self, client, datos, admin):
        r = await client.get("/me", headers=admin)
        assert "X-New-Token" not in r.headers

    async def test_renovacion_tambien_en_respuestas_de_error(self, client, sesiones, datos):
        """Un 403 con token renovado también entrega el nuevo token."""
        viejo = await token_por_vencer(sesiones, datos.sin_roles_id)
        r = await client.get("/asignaciones", headers=auth(viejo))
        assert r.status_code == 403
        assert r.headers.get("X-New-Token")

    async def test_verify_token_informa_renovacion(self, client, sesiones, datos):
        viejo = await token_por_vencer(sesiones, datos.admin_id)
        r = await client.get("/verify-token", headers=auth(viejo))
        cuerpo = r.json()
        assert cuerpo["should_refresh"] is True
        assert cuerpo["new_token"] == r.headers["X-New-Token"]


# ─── CLAIMS DEL JWT ───────────────────────────────────────────────────────────

def firmar(claims: dict) -> str:
    """JWT firmado con la clave de la app pero con claims arbitrarios."""
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def vence_en(minutos: int = 60) -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=minutos)


class TestClaimsToken:
    async def test_leer_token_valida_los_claims(self, datos):
        payload = leer_token(datos.tokens["admin"])
        assert payload.sub == datos.admin_id
        assert payload.jti

    def test_leer_token_sin_jti(self):
        assert leer_token(firmar({"sub": "1", "exp": vence_en()})) is None

    def test_leer_token_vencido(self):
        assert leer_token(firmar({"sub": "1", "jti": "x", "exp": vence_en(-5)})) is None

    async def test_token_sin_jti_es_401(self, client, datos):
        token = firmar({"sub": str(datos.admin_id), "exp": vence_en()})
        r = await client.get("/me", headers=auth(token))
        assert r.status_code == 401
        assert r.json()["message"] == "Usuario no autenticado"

    async def test_sub_no_numerico_es_401(self, client, datos):
        token = firmar({"sub": "admin", "jti": "abc", "exp": vence_en()})
        assert (await client.get("/me", headers=auth(token))).status_code == 401

    async def test_jti_no_registrado_es_401(self, client, datos):
        token = firmar({"sub": str(datos.admin_id), "jti": "no-registrado", "exp": vence_en()})
        assert (await client.get("/me", headers=auth(token))).status_code == 401
