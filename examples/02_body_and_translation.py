"""
Body parsing and translation example.

Demonstrates:
- ctx.body() for JSON bodies, and the ?body= shortcut on GET requests
- Converting body errors into HTTP errors
- ctx.i18n() backed by TranslationMiddleware
"""

from fastapi import HTTPException

from fastapi_request_basics import (
    Basics,
    BodyError,
    Dispatcher,
    HttpBasics,
    TranslationMiddleware,
)

CATALOGS = {
    "en": {"created": "Created %s", "welcome": "Welcome"},
    "es": {"created": "Creado %s", "welcome": "Bienvenido"},
}

dispatcher = Dispatcher()
dispatcher.app.add_middleware(TranslationMiddleware, catalogs=CATALOGS)
app = Basics(dispatcher)


async def create_item(ctx: HttpBasics):
    try:
        item = await ctx.body()
    except BodyError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    ctx.response.status_code = 201
    welcome, message = ctx.i18n("welcome", ["created", item.get("name", "?")])
    return {"welcome": welcome, "message": message, "item": item}


async def search(ctx: HttpBasics):
    try:
        query = await ctx.body()
    except BodyError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    return {"query": query}


app.post("/items", create_item)
app.get("/search", search)


if __name__ == "__main__":
    app.listen(8000)

    # Test with:
    # curl -X POST -H 'Accept-Language: es' -d '{"name": "lamp"}' localhost:8000/items
    # curl 'localhost:8000/search?body=%7B%22q%22%3A%22lamp%22%7D'
