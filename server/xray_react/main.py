from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from xray_react import __version__
from xray_react.routers import channel, components, hierarchy, project, sources

app = FastAPI(
    title="xray-react Server",
    description="Component hierarchy inspection and click-to-open source resolution.",
    version=__version__,
)

# The overlay runs inside whatever dev server hosts the app, so allow any origin.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(project.router)
app.include_router(components.router)
app.include_router(sources.router)
app.include_router(hierarchy.router)
app.include_router(channel.router)


@app.get("/api-status")
async def root():
    return {"message": "xray-react server is running. Visit /docs for API documentation."}
