"""
Tool registry and executor for the conversational loop.

TOOL_SPECS is the stable contract between a conversational client and the
side-effecting operations of the core. Every call is validated against
its JSON input schema before it runs, and file writes are checked by the
path validator before anything touches storage. Results are JSON strings;
failures are {"error": ...} results, never exceptions.
"""

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from verdant.application.ledgers import (
    ActivityLog,
    ChangeRegistry,
    DecisionMemory,
    GardenersMemory,
    LivingReference,
    SparkQueue,
)
from verdant.application.pipeline_service import PipelineStateMachine
from verdant.application.review_orchestrator import ReviewOrchestrator
from verdant.domain.chat import ToolSpec
from verdant.domain.exceptions import PathRejected, ToolInputError, VerdantError
from verdant.domain.interfaces import PathValidatorInterface, ProjectFilesInterface
from verdant.domain.models import ZONE_ORDER, ComponentArtifacts
from verdant.guards import StaticAnalysis
from verdant.schemas import validate_against

logger = logging.getLogger(__name__)

READ_FILE_LIMIT = 8000
DETAIL_CSS_LIMIT = 4000
ANALYSIS_PREVIEW_LIMIT = 500
CHAT_ACTOR = "chat-agent"
TERRARIUM_CSS = "src/library/terrarium.css"
UTILITIES_IMPORT = "@import './utilities.css';"


def _object(properties: dict[str, Any], required: tuple[str, ...] = ()) -> dict[str, Any]:
    return {"type": "object", "properties": properties, "required": list(required)}


_STR = {"type": "string", "minLength": 1}
_LIMIT = {"type": "integer", "minimum": 1, "maximum": 500}


def _described(schema: Mapping[str, Any], description: str) -> dict[str, Any]:
    return {**schema, "description": description}


# =============================================================================
# TOOL SCHEMAS
# =============================================================================

TOOL_SPECS: tuple[ToolSpec, ...] = (
    # Read-only
    ToolSpec(
        "get_pipeline_state",
        "Get the current pipeline state: which components are in each zone "
        "(nursery, workshop, canopy, stable) with maturity and review status.",
        _object({}),
    ),
    ToolSpec(
        "get_component_details",
        "Get detailed information about one component including its CSS, "
        "spec and pipeline entry.",
        _object(
            {
                "componentId": _described(
                    _STR, "Component ID (e.g. COMP-002) or name (e.g. toggle)"
                )
            },
            ("componentId",),
        ),
    ),
    ToolSpec(
        "get_recent_decisions",
        "Get recent governance decisions. Optionally filter by component.",
        _object(
            {
                "componentId": _described(_STR, "Optional component ID or name"),
                "limit": _described(_LIMIT, "Max decisions to return (default 10)"),
            }
        ),
    ),
    ToolSpec(
        "get_activity_log",
        "Get recent activity log entries showing what has happened in the system.",
        _object({"limit": _described(_LIMIT, "Max entries to return (default 20)")}),
    ),
    ToolSpec(
        "get_changes",
        "Query the change registry for file modifications, filtered by file "
        "path (partial match) or change type.",
        _object(
            {
                "file": _described(_STR, "Filter by file path (partial match)"),
                "changeType": _described(
                    _STR, "token-edit, css-edit, spec-update or promotion"
                ),
                "limit": _described(_LIMIT, "Max entries to return (default 20)"),
            }
        ),
    ),
    ToolSpec(
        "get_seed_vault",
        "Read the seed vault: archived components with the reason they were archived.",
        _object({}),
    ),
    ToolSpec(
        "get_wiki",
        "Get living reference entries: terminology, patterns and system documentation.",
        _object(
            {"term": _described(_STR, "Optional term to look up; omit for all entries")}
        ),
    ),
    ToolSpec(
        "audit_tokens",
        "Audit a component's CSS for token compliance and BEM naming without "
        "calling any reviewer.",
        _object(
            {"componentName": _described(_STR, "Component name (e.g. toggle)")},
            ("componentName",),
        ),
    ),
    # Governance actions
    ToolSpec(
        "run_governance_review",
        "Run a full five-reviewer governance review cycle on a component and "
        "record the decision. Takes 15-30 seconds.",
        _object(
            {"componentId": _described(_STR, "Component ID or name")},
            ("componentId",),
        ),
    ),
    ToolSpec(
        "run_single_agent_review",
        "Ask a single domain reviewer about a component. Nothing is recorded.",
        _object(
            {
                "agentId": {
                    "type": "string",
                    "enum": ["ts", "ag", "pl", "ca", "px"],
                    "description": "ts (Token Steward), ag (Accessibility Guardian), "
                    "pl (Pattern Librarian), ca (Component Architect), px (Product Liaison)",
                },
                "componentId": _described(_STR, "Component ID or name"),
            },
            ("agentId", "componentId"),
        ),
    ),
    ToolSpec(
        "promote_component",
        "Promote a component to the next zone (nursery to workshop, workshop "
        "to canopy, canopy to stable).",
        _object(
            {"componentId": _described(_STR, "Component ID or name")},
            ("componentId",),
        ),
    ),
    ToolSpec(
        "create_component",
        "Create a new component and plant it in the nursery.",
        _object(
            {
                "name": _described(_STR, "Component name (e.g. Slider)"),
                "category": _described(_STR, "ui-component, pattern or layout"),
                "description": _described(
                    _STR, "JTBD description: what job does this component do?"
                ),
            },
            ("name", "category", "description"),
        ),
    ),
    ToolSpec(
        "seed_vault_component",
        "Archive a component to the seed vault. Its context is preserved for "
        "potential revival.",
        _object(
            {
                "componentId": _described(_STR, "Component ID or name"),
                "reason": _described(_STR, "Reason for archiving"),
            },
            ("componentId", "reason"),
        ),
    ),
    # Files
    ToolSpec(
        "read_file",
        "Read a project file under src/. Path is relative to the project root.",
        _object(
            {"path": _described(_STR, "File path relative to project root")},
            ("path",),
        ),
    ),
    ToolSpec(
        "write_component_css",
        "Create or overwrite src/components/{name}/{name}.css.",
        _object(
            {
                "name": _described(_STR, "Component name (lowercase, e.g. slider)"),
                "css": {"type": "string", "description": "Full CSS content"},
            },
            ("name", "css"),
        ),
    ),
    ToolSpec(
        "write_component_spec",
        "Create or overwrite src/components/{name}/{name}.spec.json.",
        _object(
            {
                "name": _described(_STR, "Component name (lowercase, e.g. slider)"),
                "spec": {
                    "type": "object",
                    "description": "Component specification (anatomy, JTBD, tokens, accessibility)",
                },
            },
            ("name", "spec"),
        ),
    ),
    ToolSpec(
        "patch_css",
        "Find-and-replace within a CSS file. The only tool that can modify "
        "foundation.css. Patches are applied in order.",
        _object(
            {
                "path": _described(_STR, "CSS file path relative to project root"),
                "patches": {
                    "type": "array",
                    "minItems": 1,
                    "items": _object(
                        {
                            "find": _described(_STR, "Exact string to find"),
                            "replace": {"type": "string"},
                        },
                        ("find", "replace"),
                    ),
                },
            },
            ("path", "patches"),
        ),
    ),
    ToolSpec(
        "write_token_file",
        "Create or update a DTCG token file in src/tokens/. The filename must "
        "end in .tokens.json.",
        _object(
            {
                "filename": _described(_STR, "Token filename (e.g. color.tokens.json)"),
                "tokens": {"type": "object", "description": "DTCG token object"},
            },
            ("filename", "tokens"),
        ),
    ),
    ToolSpec(
        "update_wiki",
        "Add or update a living reference entry.",
        _object(
            {
                "key": _described(_STR, "Kebab-case identifier"),
                "term": _described(_STR, "Display name"),
                "category": _described(_STR, "Grouping category"),
                "definition": _described(_STR, "Full definition text"),
                "source": _described(_STR, "Where the concept originated"),
                "rule": {"type": "string", "description": "Optional governance rule"},
            },
            ("key", "term", "category", "definition", "source"),
        ),
    ),
    ToolSpec(
        "update_terrarium_css",
        "Add or remove a component's @import line in src/library/terrarium.css "
        "so its styles load in the library.",
        _object(
            {
                "name": _described(_STR, "Component name (lowercase, e.g. slider)"),
                "action": {"type": "string", "enum": ["add", "remove"]},
            },
            ("name", "action"),
        ),
    ),
    # Gardener
    ToolSpec(
        "capture_spark",
        "Capture an idea for a future component in the spark queue.",
        _object(
            {
                "name": _described(_STR, "Short name for the idea"),
                "description": _described(_STR, "What the component would do"),
                "source": _described(_STR, "Who raised it (default gardener)"),
            },
            ("name", "description"),
        ),
    ),
    ToolSpec(
        "record_gardener_words",
        "Record the gardener's exact words on a topic so later sessions can "
        "quote them.",
        _object(
            {
                "topic": _described(_STR, "Topic the words are about"),
                "words": _described(_STR, "The gardener's words, verbatim"),
            },
            ("topic", "words"),
        ),
    ),
)

TOOLS_BY_NAME: dict[str, ToolSpec] = {t.name: t for t in TOOL_SPECS}


# =============================================================================
# EXECUTION
# =============================================================================


@dataclass(frozen=True)
class ToolOutcome:
    """Result of one tool call: the JSON content plus its decoded form."""

    content: str
    result: Any
    success: bool
    error: str | None = None


def summarize_tool_result(tool_name: str, parsed: Any) -> str:
    """Short, bounded preview of a tool result for the client."""
    if isinstance(parsed, dict) and parsed.get("error"):
        return str(parsed["error"])[:200]
    if tool_name == "get_pipeline_state" and isinstance(parsed, dict):
        return ", ".join(f"{z.value}: {len(parsed.get(z.value) or [])}" for z in ZONE_ORDER)
    if tool_name == "get_component_details" and isinstance(parsed, dict):
        return f"{parsed.get('name') or parsed.get('id')} ({parsed.get('zone')}, {parsed.get('maturity')})"
    if tool_name == "get_recent_decisions":
        return f"{len(parsed) if isinstance(parsed, list) else 0} decisions"
    if tool_name == "get_changes":
        return f"{len(parsed) if isinstance(parsed, list) else 0} changes"
    if tool_name in ("get_activity_log", "get_seed_vault"):
        return f"{len(parsed) if isinstance(parsed, list) else 0} entries"
    if tool_name == "get_wiki" and isinstance(parsed, dict):
        return f"{len(parsed)} entries"
    if tool_name == "audit_tokens" and isinstance(parsed, dict):
        return f"{parsed.get('component')}: {len(parsed.get('issues') or [])} issues"
    if tool_name == "run_governance_review" and isinstance(parsed, dict):
        passed = (parsed.get("zoneVerdict") or {}).get("passed")
        return f"{parsed.get('component')}: {'PASSED' if passed else 'NEEDS WORK'}"
    if tool_name == "run_single_agent_review" and isinstance(parsed, dict):
        return f"{parsed.get('agent')}: {parsed.get('verdict')} ({parsed.get('score')}/100)"
    if tool_name == "promote_component" and isinstance(parsed, dict):
        component = parsed.get("component")
        if isinstance(component, dict):
            return f"{component.get('name')}: {parsed.get('from')} -> {parsed.get('to')}"
        return "promoted"
    if tool_name == "create_component" and isinstance(parsed, dict):
        return f"{parsed.get('name')} created ({parsed.get('id')})"
    if tool_name == "seed_vault_component" and isinstance(parsed, dict):
        component = parsed.get("component")
        name = component.get("name") if isinstance(component, dict) else None
        return f"archived: {name}" if name else "archived"
    if tool_name == "read_file" and isinstance(parsed, dict):
        return f"read {parsed.get('path')} ({parsed.get('lines')} lines)"
    if tool_name in (
        "write_component_css",
        "write_component_spec",
        "patch_css",
        "write_token_file",
        "update_terrarium_css",
    ) and isinstance(parsed, dict):
        return f"{parsed.get('action') or 'wrote'} {parsed.get('path')}"
    if tool_name == "update_wiki" and isinstance(parsed, dict):
        return f"updated wiki: {parsed.get('key')}"
    if tool_name == "capture_spark" and isinstance(parsed, dict):
        spark = parsed.get("spark")
        return f"spark: {spark.get('name')}" if isinstance(spark, dict) else "captured"
    if tool_name == "record_gardener_words" and isinstance(parsed, dict):
        return f"recorded words on {parsed.get('topic')}"
    return "done"


class ToolExecutor:
    """Executes registry tools against the real ledgers, pipeline and files."""

    def __init__(
        self,
        pipeline: PipelineStateMachine,
        orchestrator: ReviewOrchestrator,
        decisions: DecisionMemory,
        changes: ChangeRegistry,
        activity: ActivityLog,
        wiki: LivingReference,
        sparks: SparkQueue,
        memory: GardenersMemory,
        files: ProjectFilesInterface,
        paths: PathValidatorInterface,
        static_analysis: StaticAnalysis | None = None,
    ):
        self._pipeline = pipeline
        self._orchestrator = orchestrator
        self._decisions = decisions
        self._changes = changes
        self._activity = activity
        self._wiki = wiki
        self._sparks = sparks
        self._memory = memory
        self._files = files
        self._paths = paths
        self._static = static_analysis or StaticAnalysis()
        self._handlers: dict[str, Callable[[Mapping[str, Any]], Any]] = {
            spec.name: getattr(self, f"_{spec.name}") for spec in TOOL_SPECS
        }

    @property
    def specs(self) -> tuple[ToolSpec, ...]:
        return TOOL_SPECS

    def execute(self, tool_name: str, arguments: Mapping[str, Any]) -> ToolOutcome:
        """
        Run one tool call.

        Args:
            tool_name: Registry name of the tool
            arguments: Decoded tool input

        Returns:
            ToolOutcome; errors are reported in-band, never raised
        """
        try:
            result = self._dispatch(tool_name, arguments)
        except VerdantError as e:
            logger.warning("Tool %s failed: %s", tool_name, e)
            result = {"error": str(e)}
        except Exception as e:
            logger.exception("Tool %s raised", tool_name)
            result = {"error": str(e)}

        error = result.get("error") if isinstance(result, dict) else None
        return ToolOutcome(
            content=json.dumps(result),
            result=result,
            success=not error,
            error=str(error) if error else None,
        )

    def _dispatch(self, tool_name: str, arguments: Mapping[str, Any]) -> Any:
        spec = TOOLS_BY_NAME.get(tool_name)
        if spec is None:
            return {"error": f"Unknown tool: {tool_name}"}
        problems = validate_against(dict(arguments), dict(spec.input_schema))
        if problems:
            raise ToolInputError(tool_name, "; ".join(problems))
        return self._handlers[tool_name](arguments)

    def _require_write(self, rel_path: str, mode: str = "full") -> None:
        decision = self._paths.check_write(rel_path, mode)
        if not decision.allowed:
            raise PathRejected(rel_path, decision.reason)

    def _resolve_id(self, id_or_name: str) -> str | None:
        component = self._pipeline.find(id_or_name)
        return component.id if component else None

    # -------------------------------------------------------------------------
    # Read-only tools
    # -------------------------------------------------------------------------

    def _get_pipeline_state(self, args: Mapping[str, Any]) -> Any:
        doc = self._pipeline.state()
        return {
            zone.value: [
                {
                    "id": c.id,
                    "name": c.name,
                    "maturity": c.maturity.value,
                    "zone": c.zone.value,
                    "description": c.description,
                    "reviewStatus": ", ".join(
                        f"{s.agent_id}:{s.verdict}" for s in c.agent_reviews
                    )
                    or "none",
                }
                for c in doc.components_in(zone)
            ]
            for zone in ZONE_ORDER
        }

    def _get_component_details(self, args: Mapping[str, Any]) -> Any:
        component = self._pipeline.find(args["componentId"])
        if component is None:
            return {"error": f"Component '{args['componentId']}' not found"}
        artifacts = self._orchestrator.load_artifacts(component)
        result = component.to_dict()
        if artifacts.css:
            css = artifacts.css
            if len(css) > DETAIL_CSS_LIMIT:
                css = css[:DETAIL_CSS_LIMIT] + "\n/* ... truncated ... */"
            result["css"] = css
        if artifacts.spec is not None:
            result["spec"] = dict(artifacts.spec)
        return result

    def _get_recent_decisions(self, args: Mapping[str, Any]) -> Any:
        limit = args.get("limit", 10)
        key = args.get("componentId")
        if key:
            wanted = key.lower()
            records = self._decisions.query(
                lambda d: d.component_id.lower() == wanted
                or (d.component_pipeline_id or "").lower() == wanted
            )[-limit:]
        else:
            records = self._decisions.tail(limit)
        return [d.to_dict() for d in records]

    def _get_activity_log(self, args: Mapping[str, Any]) -> Any:
        return [a.to_dict() for a in self._activity.tail(args.get("limit", 20))]

    def _get_changes(self, args: Mapping[str, Any]) -> Any:
        records = self._changes.query_by(
            file=args.get("file"), change_type=args.get("changeType")
        )
        return [c.to_dict() for c in records[-args.get("limit", 20) :]]

    def _get_seed_vault(self, args: Mapping[str, Any]) -> Any:
        return [a.to_dict() for a in self._activity.archived()]

    def _get_wiki(self, args: Mapping[str, Any]) -> Any:
        entries = self._wiki.entries()
        term = args.get("term")
        if not term:
            return entries
        wanted = term.lower()
        for key, entry in entries.items():
            if key.lower() == wanted or str(entry.get("term") or "").lower() == wanted:
                return {key: entry}
        return {"error": f"No wiki entry for '{term}'"}

    def _audit_tokens(self, args: Mapping[str, Any]) -> Any:
        name = args["componentName"].lower()
        css_path = f"src/components/{name}/{name}.css"
        css = self._files.read_text(css_path)
        if css is None:
            return {"error": f"No CSS found at {css_path}"}
        findings = self._static.run(ComponentArtifacts(name=name, css=css))
        return {
            "component": name,
            "path": css_path,
            "issues": list(findings.token_issues),
            "passes": list(findings.token_passes),
            "namingIssues": list(findings.naming_issues),
        }

    # -------------------------------------------------------------------------
    # Governance tools
    # -------------------------------------------------------------------------

    def _run_governance_review(self, args: Mapping[str, Any]) -> Any:
        result = self._orchestrator.run_review(args["componentId"])
        return {
            "component": result.component.name,
            "zone": result.zone.value,
            "zoneVerdict": result.zone_verdict.to_dict(),
            "agentReviews": {
                r.agent_id: {
                    "verdict": r.verdict.value,
                    "score": r.score,
                    "orpa": r.rationale.to_dict(),
                    "analysis": r.analysis[:ANALYSIS_PREVIEW_LIMIT],
                    "conditionalApproval": r.conditional_approval,
                }
                for r in result.agent_reviews
            },
            "decisionId": result.decision_id,
            "timestamp": result.timestamp,
        }

    def _run_single_agent_review(self, args: Mapping[str, Any]) -> Any:
        result = self._orchestrator.run_single_agent_review(
            args["agentId"], args["componentId"]
        )
        review = result.review
        return {
            "agent": review.agent_id,
            "verdict": review.verdict.value,
            "score": review.score,
            "orpa": review.rationale.to_dict(),
            "analysis": review.analysis[:ANALYSIS_PREVIEW_LIMIT],
            "conditionalApproval": review.conditional_approval,
        }

    def _promote_component(self, args: Mapping[str, Any]) -> Any:
        component_id = self._resolve_id(args["componentId"]) or args["componentId"]
        return self._pipeline.promote(component_id, actor=CHAT_ACTOR).to_dict()

    def _create_component(self, args: Mapping[str, Any]) -> Any:
        component = self._pipeline.create(
            args["name"], args["category"], args["description"], actor=CHAT_ACTOR
        )
        return component.to_dict()

    def _seed_vault_component(self, args: Mapping[str, Any]) -> Any:
        component_id = self._resolve_id(args["componentId"]) or args["componentId"]
        return self._pipeline.archive(
            component_id, args["reason"], actor=CHAT_ACTOR
        ).to_dict()

    # -------------------------------------------------------------------------
    # File tools
    # -------------------------------------------------------------------------

    def _record_write(
        self,
        rel_path: str,
        change_type: str,
        description: str,
        risk: str,
        action: str,
        component_name: str | None,
        detail: str,
    ) -> None:
        self._changes.record(rel_path, change_type, description, breakage_risk=risk)
        self._activity.log(action, None, component_name, CHAT_ACTOR, detail)

    def _read_file(self, args: Mapping[str, Any]) -> Any:
        path = args["path"]
        decision = self._paths.check_read(path)
        if not decision.allowed:
            raise PathRejected(path, decision.reason)
        content = self._files.read_text(path)
        if content is None:
            return {"error": f"File not found: {path}"}
        lines = content.count("\n") + 1
        if len(content) > READ_FILE_LIMIT:
            content = (
                content[:READ_FILE_LIMIT]
                + f"\n/* ... truncated ({READ_FILE_LIMIT} char limit) ... */"
            )
        return {"path": path, "lines": lines, "content": content}

    def _write_component_css(self, args: Mapping[str, Any]) -> Any:
        name = args["name"].lower()
        rel_path = f"src/components/{name}/{name}.css"
        self._require_write(rel_path)
        self._files.write_text(rel_path, args["css"])
        self._record_write(
            rel_path,
            "css-edit",
            f"Chat agent wrote component CSS: {rel_path}",
            "low",
            "file-write",
            name,
            f"Wrote {rel_path}",
        )
        return {"success": True, "path": rel_path, "action": "wrote"}

    def _write_component_spec(self, args: Mapping[str, Any]) -> Any:
        name = args["name"].lower()
        rel_path = f"src/components/{name}/{name}.spec.json"
        self._require_write(rel_path)
        self._files.write_text(rel_path, json.dumps(args["spec"], indent=2) + "\n")
        self._record_write(
            rel_path,
            "spec-update",
            f"Chat agent wrote component spec: {rel_path}",
            "low",
            "file-write",
            name,
            f"Wrote {rel_path}",
        )
        return {"success": True, "path": rel_path, "action": "wrote"}

    def _patch_css(self, args: Mapping[str, Any]) -> Any:
        rel_path = args["path"]
        self._require_write(rel_path, mode="patch")
        content = self._files.read_text(rel_path)
        if content is None:
            return {"error": f"File not found: {rel_path}"}

        # Each find is matched against the content as patched so far.
        for patch in args["patches"]:
            if patch["find"] not in content:
                return {"error": f"Find string not found in file: {patch['find'][:60]}"}
            content = content.replace(patch["find"], patch["replace"], 1)

        self._files.write_text(rel_path, content)
        count = len(args["patches"])
        self._record_write(
            rel_path,
            "css-edit",
            f"Chat agent patched CSS ({count} replacements): {rel_path}",
            "low",
            "file-patch",
            None,
            f"Patched {rel_path} ({count} changes)",
        )
        return {
            "success": True,
            "path": rel_path,
            "action": "patched",
            "patchesApplied": count,
        }

    def _write_token_file(self, args: Mapping[str, Any]) -> Any:
        filename = args["filename"]
        if not filename.endswith(".tokens.json"):
            return {"error": "Filename must end in .tokens.json"}
        rel_path = f"src/tokens/{filename}"
        self._require_write(rel_path)
        existed = self._files.exists(rel_path)
        self._files.write_text(rel_path, json.dumps(args["tokens"], indent=2) + "\n")
        action = "updated" if existed else "created"
        self._record_write(
            rel_path,
            "token-edit",
            f"Chat agent {action} token file: {rel_path}",
            "medium",
            "file-write",
            None,
            f"{action.capitalize()} {rel_path}",
        )
        return {"success": True, "path": rel_path, "action": action}

    def _update_wiki(self, args: Mapping[str, Any]) -> Any:
        self._require_write("src/data/wiki.json")
        self._wiki.add(
            args["key"],
            term=args["term"],
            category=args["category"],
            definition=args["definition"],
            source=args["source"],
            rule=args.get("rule"),
        )
        self._activity.log(
            "wiki-update", None, None, CHAT_ACTOR, f"Updated wiki entry: {args['term']}"
        )
        return {"success": True, "key": args["key"], "term": args["term"]}

    def _update_terrarium_css(self, args: Mapping[str, Any]) -> Any:
        name = args["name"].lower()
        self._require_write(TERRARIUM_CSS)
        content = self._files.read_text(TERRARIUM_CSS)
        if content is None:
            return {"error": f"File not found: {TERRARIUM_CSS}"}
        line = f"@import '../components/{name}/{name}.css';"

        def result(action: str) -> dict[str, Any]:
            return {"success": True, "path": TERRARIUM_CSS, "action": action, "name": name}

        if args["action"] == "add":
            if line in content:
                return result("already present")
            if UTILITIES_IMPORT in content:
                content = content.replace(
                    UTILITIES_IMPORT, f"{line}\n{UTILITIES_IMPORT}", 1
                )
            else:
                content = content.rstrip() + "\n" + line + "\n"
            self._files.write_text(TERRARIUM_CSS, content)
            self._record_write(
                TERRARIUM_CSS,
                "css-edit",
                f"Chat agent added @import for {name} component",
                "low",
                "file-write",
                name,
                f"Added @import for {name} in terrarium.css",
            )
            return result("added")

        if line not in content:
            return result("not present")
        content = content.replace(line + "\n", "").replace(line, "")
        self._files.write_text(TERRARIUM_CSS, content)
        self._record_write(
            TERRARIUM_CSS,
            "css-edit",
            f"Chat agent removed @import for {name} component",
            "medium",
            "file-write",
            name,
            f"Removed @import for {name} from terrarium.css",
        )
        return result("removed")

    # -------------------------------------------------------------------------
    # Gardener tools
    # -------------------------------------------------------------------------

    def _capture_spark(self, args: Mapping[str, Any]) -> Any:
        source = args.get("source") or "gardener"
        spark = self._sparks.capture(args["name"], args["description"], source)
        self._activity.log("spark-captured", None, spark.name, source, spark.description)
        return {"success": True, "spark": spark.to_dict()}

    def _record_gardener_words(self, args: Mapping[str, Any]) -> Any:
        self._memory.record_words(args["topic"], args["words"])
        return {"success": True, "topic": args["topic"], "recorded": True}


__all__ = [
    "TOOL_SPECS",
    "TOOLS_BY_NAME",
    "ToolExecutor",
    "ToolOutcome",
    "summarize_tool_result",
]
