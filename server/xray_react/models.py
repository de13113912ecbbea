from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from xray_react.config import DEFAULT_PORT, UI_MODE_FULL


class CandidateEntry(BaseModel):
    path: str
    # Directory tokens used to disambiguate duplicate component names,
    # e.g. ["components", "Navbar"] for src/components/Navbar/Logo.tsx
    context: List[str] = Field(default_factory=list)
    priority: int = 0


class XrayOptions(BaseModel):
    project_root: str
    port: int = DEFAULT_PORT
    mode: str = UI_MODE_FULL
    server: bool = True
    editor: Optional[str] = None


class ProjectConfig(BaseModel):
    projectRoot: Optional[str] = None
    port: int = DEFAULT_PORT
    mode: str = UI_MODE_FULL


class UsageMapPayload(BaseModel):
    usage: Dict[str, List[str]] = Field(default_factory=dict)


class ImportMapPayload(BaseModel):
    imports: Dict[str, List[str]] = Field(default_factory=dict)


class ProjectFilesPayload(BaseModel):
    files: List[str] = Field(default_factory=list)


class ComponentPathRequest(BaseModel):
    # Arrow-separated hierarchy, most distant ancestor first, leaf last.
    structure: str


class ResolveResponse(BaseModel):
    structure: str
    component: Optional[str] = None
    path: Optional[str] = None
    opened: bool = False


class RegisterSourceRequest(BaseModel):
    name: str
    path: str


class SourceMapSummary(BaseModel):
    count: int
    candidates: int = 0


class RenderNodePayload(BaseModel):
    # Component name or markup tag; None for nodes with no resolvable type.
    name: Optional[str] = None
    sourceFile: Optional[str] = None
    line: Optional[int] = None
    key: Optional[str] = None


class HierarchyRequest(BaseModel):
    # Nearest node first, following parent links towards the root.
    nodes: List[RenderNodePayload] = Field(default_factory=list)
    leaf: Optional[str] = None


class HierarchyResponse(BaseModel):
    full: str
    filtered: str
    preferred: str


class ElementPayload(BaseModel):
    tagName: str
    # Render branch of the element, nearest node first.
    nodes: List[RenderNodePayload] = Field(default_factory=list)
    # Index of the parent element in the same request.
    parent: Optional[int] = None
    isOverlay: bool = False


class ActivationRequest(BaseModel):
    elements: List[ElementPayload] = Field(default_factory=list)


class OverlayEntryPayload(BaseModel):
    name: str
    uid: Optional[str] = None
    full: str
    filtered: str
    preferred: str


class ActivationResponse(BaseModel):
    entries: List[OverlayEntryPayload] = Field(default_factory=list)
