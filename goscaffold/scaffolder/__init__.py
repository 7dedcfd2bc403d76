"""goscaffold generation engine -- renders a Go backend skeleton from templates.

Quick usage::

    from goscaffold.scaffolder import FieldKind, ScaffoldRun, StackVariant

    run = ScaffoldRun(StackVariant.RELATIONAL_WITH_CODEGEN, "./sample-api")
    run.execute({
        FieldKind.MODULE_PATH: "sample-api",
        FieldKind.DATABASE_NAME: "sampledb",
        FieldKind.DB_USER: "admin",
        FieldKind.DB_PASSWORD: "secret",
    })
"""

from goscaffold.scaffolder.binder import SubstitutionContext, VariableBinder
from goscaffold.scaffolder.catalog import TemplateCatalog, VariantCatalog, default_catalog
from goscaffold.scaffolder.engine import RunState, ScaffoldRun
from goscaffold.scaffolder.errors import (
    CatalogConsistencyError,
    InputValidationError,
    MaterializationError,
    MissingVariableError,
    ScaffoldError,
)
from goscaffold.scaffolder.materializer import ProjectMaterializer
from goscaffold.scaffolder.models import (
    FieldKind,
    GeneratedFile,
    ProjectSpec,
    StackVariant,
    TemplateEntry,
)
from goscaffold.scaffolder.templates import TemplateRenderer
from goscaffold.scaffolder.toolchain import ToolchainHandoff
from goscaffold.scaffolder.validator import InputValidator

__all__ = [
    "CatalogConsistencyError",
    "FieldKind",
    "GeneratedFile",
    "InputValidationError",
    "InputValidator",
    "MaterializationError",
    "MissingVariableError",
    "ProjectMaterializer",
    "ProjectSpec",
    "RunState",
    "ScaffoldError",
    "ScaffoldRun",
    "StackVariant",
    "SubstitutionContext",
    "TemplateCatalog",
    "TemplateEntry",
    "TemplateRenderer",
    "ToolchainHandoff",
    "VariableBinder",
    "VariantCatalog",
    "default_catalog",
]
