"""End-to-end scenarios — Basics wrapping a Dispatcher, driven over ASGI."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException
from httpx import ASGITransport, AsyncClient
from starlette.responses import Response

from fastapi_request_basics import (
    Basics,
    BasicsSettings,
    BodyError,
    Dispatcher,
    HttpBasics,
    TranslationMiddleware,
)
from fastapi_request_basics import dispatcher as dispatcher_module

CONTEXT_FIELDS = ["body", "i18n", "next", "request", "response", "use"]


async def _request(
    app: Any,
    method: str = "GET",
    path: str = "/test",
    **kwargs: Any,
) -> Any:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await getattr(client, method.lower())(path, **kwargs)


def _describe(ctx: HttpBasics) -> dict[str, Any]:
    return {
        "fields": sorted(vars(ctx)),
        "i18n": ctx.i18n is not None,
        "next": callable(ctx.next),
        "method": ctx.request.method,
    }


@pytest.fixture
def dispatcher() -> Dispatcher:
    return Dispatcher()


@pytest.fixture
def app(dispatcher: Dispatcher) -> Basics:
    return Basics(dispatcher)


async def _read_body(ctx: HttpBasics) -> Any:
    try:
        return await ctx.body()
    except BodyError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


# -- Context shape per registration verb --


class TestContextShape:
    @pytest.mark.parametrize("verb", ["use", "get", "post", "delete"])
    async def test_handler_receives_context(
        self, verb: str, app: Basics, dispatcher: Dispatcher
    ) -> None:
        getattr(app, verb)("/test", _describe)
        method = "GET" if verb == "use" else verb.upper()
        resp = await _request(dispatcher, method=method)
        assert resp.status_code == 200
        assert resp.json() == {
            "fields": CONTEXT_FIELDS,
            "i18n": False,
            "next": True,
            "method": method,
        }

    async def test_i18n_present_with_translation_middleware(
        self, app: Basics, dispatcher: Dispatcher, catalogs: dict[str, Any]
    ) -> None:
        dispatcher.app.add_middleware(TranslationMiddleware, catalogs=catalogs)
        app.get("/test", _describe)
        resp = await _request(dispatcher)
        assert resp.json()["i18n"] is True


# -- use helper --


class TestUseHelper:
    async def test_inline_raw_middleware(
        self, app: Basics, dispatcher: Dispatcher
    ) -> None:
        async def stamp(request: Any, response: Response, call_next: Any) -> str:
            response.headers["x-stamp"] = request.url.path
            return "stamped"

        async def handler(ctx: HttpBasics) -> dict[str, str]:
            return {"result": await ctx.use(stamp)}

        app.get("/test", handler)
        resp = await _request(dispatcher)
        assert resp.json() == {"result": "stamped"}
        assert resp.headers["x-stamp"] == "/test"


# -- body helper --


class TestBodyHelper:
    async def test_get_query_body(self, app: Basics, dispatcher: Dispatcher) -> None:
        app.get("/test", _read_body)
        resp = await _request(dispatcher, params={"body": '{"a":1}'})
        assert resp.json() == {"a": 1}

    async def test_get_query_body_invalid(
        self, app: Basics, dispatcher: Dispatcher
    ) -> None:
        app.get("/test", _read_body)
        resp = await _request(dispatcher, params={"body": "{a:"})
        assert resp.status_code == 400
        assert "Malformed" in resp.json()["detail"]

    async def test_post_json_body(self, app: Basics, dispatcher: Dispatcher) -> None:
        app.post("/test", _read_body)
        resp = await _request(
            dispatcher,
            method="POST",
            content=b'{"x":5}',
            headers={"Content-Type": "application/json"},
        )
        assert resp.json() == {"x": 5}

    async def test_post_malformed_body(
        self, app: Basics, dispatcher: Dispatcher
    ) -> None:
        app.post("/test", _read_body)
        resp = await _request(dispatcher, method="POST", content=b"{nope")
        assert resp.status_code == 400

    async def test_post_body_too_large(self) -> None:
        config = BasicsSettings(body_limit=16)
        dispatcher = Dispatcher(config=config)
        Basics(dispatcher, config=config).post("/test", _read_body)
        resp = await _request(
            dispatcher, method="POST", json={"payload": "x" * 64}
        )
        assert resp.status_code == 413

    async def test_adapter_uses_dispatcher_config(self) -> None:
        dispatcher = Dispatcher(config=BasicsSettings(body_limit=16))
        Basics(dispatcher).post("/test", _read_body)
        resp = await _request(
            dispatcher, method="POST", json={"payload": "x" * 64}
        )
        assert resp.status_code == 413

    async def test_adapter_uses_dispatcher_query_body_key(self) -> None:
        dispatcher = Dispatcher(config=BasicsSettings(query_body_key="payload"))
        Basics(dispatcher).get("/test", _read_body)
        resp = await _request(dispatcher, params={"payload": "[1]"})
        assert resp.json() == [1]

    async def test_body_read_in_layer_reaches_route(
        self, app: Basics, dispatcher: Dispatcher
    ) -> None:
        async def audit(ctx: HttpBasics) -> Any:
            ctx.request.state.audited = await ctx.body()
            return await ctx.next()

        app.use("/test", audit)
        app.post("/test", lambda ctx: {"seen": ctx.request.state.audited})
        resp = await _request(dispatcher, method="POST", json={"k": "v"})
        assert resp.json() == {"seen": {"k": "v"}}


# -- i18n helper --


class TestI18nHelper:
    @pytest.fixture(autouse=True)
    def _translate(self, dispatcher: Dispatcher, catalogs: dict[str, Any]) -> None:
        dispatcher.app.add_middleware(TranslationMiddleware, catalogs=catalogs)

    async def test_single_key(self, app: Basics, dispatcher: Dispatcher) -> None:
        app.get("/test", lambda ctx: ctx.i18n("hello"))
        resp = await _request(dispatcher, headers={"Accept-Language": "es"})
        assert resp.json() == "Hola"

    async def test_two_keys(self, app: Basics, dispatcher: Dispatcher) -> None:
        app.get("/test", lambda ctx: ctx.i18n("a", "b"))
        resp = await _request(dispatcher)
        assert resp.json() == ["A", "B"]

    async def test_key_with_format_args(
        self, app: Basics, dispatcher: Dispatcher
    ) -> None:
        app.get("/test", lambda ctx: ctx.i18n(["greet", "Ana"]))
        resp = await _request(dispatcher, params={"lang": "es"})
        assert resp.json() == "Hola Ana"


# -- forwarding, listen, argument shifting --


class TestDispatcherSurface:
    def test_forwarded_set_and_setting(self, app: Basics) -> None:
        assert app.set("title", "demo") is app.dispatcher
        assert app.setting("title") == "demo"

    def test_wrapped_asgi_app_is_not_forwarded(
        self, app: Basics, dispatcher: Dispatcher
    ) -> None:
        assert callable(dispatcher.app)
        assert "app" not in vars(app)

    async def test_forwarded_route_registers_raw_handler(
        self, app: Basics, dispatcher: Dispatcher
    ) -> None:
        app.route("GET", "/test", lambda request, response, call_next: "raw")
        resp = await _request(dispatcher)
        assert resp.json() == "raw"

    def test_listen_is_not_intercepted(
        self, app: Basics, dispatcher: Dispatcher, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        run = MagicMock()
        monkeypatch.setattr(dispatcher_module.uvicorn, "run", run)
        monkeypatch.setattr(dispatcher_module, "configure_logging", MagicMock())
        app.listen(3001)
        assert run.call_args.args == (dispatcher.app,)
        assert run.call_args.kwargs["port"] == 3001

    async def test_leading_none_is_dropped(
        self, app: Basics, dispatcher: Dispatcher
    ) -> None:
        app.get(None, "/test", lambda ctx: "shifted")
        resp = await _request(dispatcher)
        assert resp.json() == "shifted"

    async def test_use_without_path_applies_everywhere(
        self, app: Basics, dispatcher: Dispatcher
    ) -> None:
        async def tag(ctx: HttpBasics) -> Any:
            ctx.response.headers["x-app"] = "basics"
            return await ctx.next()

        app.use(None, tag)
        app.get("/test", lambda ctx: "ok")
        resp = await _request(dispatcher)
        assert resp.headers["x-app"] == "basics"

    async def test_chained_registration(
        self, app: Basics, dispatcher: Dispatcher
    ) -> None:
        chained = app.get("/a", lambda ctx: "a")
        assert chained is dispatcher
        # The chain continues on the dispatcher, which takes raw handlers
        chained.post("/b", lambda request, response, call_next: "b")
        assert (await _request(dispatcher, path="/a")).json() == "a"
        assert (await _request(dispatcher, method="POST", path="/b")).json() == "b"

    async def test_route_params_through_context(
        self, app: Basics, dispatcher: Dispatcher
    ) -> None:
        app.get("/users/:id", lambda ctx: ctx.request.path_params["id"])
        resp = await _request(dispatcher, path="/users/12")
        assert resp.json() == "12"
