"""
Basic usage example of fastapi-request-basics.

Demonstrates:
- Wrapping a Dispatcher with Basics
- Route handlers receiving a single HttpBasics context
- Inline raw middleware with ctx.use() and chaining with ctx.next()
"""

from fastapi_request_basics import Basics, Dispatcher, HttpBasics

dispatcher = Dispatcher()
app = Basics(dispatcher)


# Raw middleware keeps the (request, response, next) shape
async def powered_by(request, response, call_next):
    response.headers["x-powered-by"] = "fastapi-request-basics"
    return await call_next()


async def log_path(ctx: HttpBasics):
    """Application-level middleware: runs for every request under /api."""
    print(f"{ctx.request.method} {ctx.request.url.path}")
    return await ctx.next()


app.use(powered_by)
app.use("/api", log_path)


@dispatcher.app.get("/health")
async def health():
    """Plain FastAPI routes keep working next to Basics routes."""
    return {"status": "ok"}


async def get_user(ctx: HttpBasics):
    await ctx.use(powered_by)
    return {"id": ctx.request.path_params["user_id"]}


app.get("/api/users/:user_id", get_user)


if __name__ == "__main__":
    app.listen(8000)

    # Test with:
    # curl -i http://localhost:8000/api/users/42
    # curl http://localhost:8000/health
