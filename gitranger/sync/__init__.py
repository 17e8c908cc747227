# GitRanger Sync Module
# Discovery, workspace scanning, planning, execution and reporting

from gitranger.sync.actions import ActionType, SyncAction, build_plan, determine_action
from gitranger.sync.discovery import DiscoveryResult, discover
from gitranger.sync.engine import SyncEngine, SyncPlan, SyncScope
from gitranger.sync.executor import Executor, execute_action
from gitranger.sync.item import DesiredRepo
from gitranger.sync.report import Diagnostic, DiagnosticKind, Outcome, ReportEntry, SyncReport
from gitranger.sync.state import LocalRepoState, LocalState, inspect_path, scan_workspace

__all__ = [
    # Item
    "DesiredRepo",
    # Discovery
    "DiscoveryResult",
    "discover",
    # State
    "LocalState",
    "LocalRepoState",
    "inspect_path",
    "scan_workspace",
    # Actions
    "ActionType",
    "SyncAction",
    "determine_action",
    "build_plan",
    # Execution
    "Executor",
    "execute_action",
    # Report
    "Outcome",
    "ReportEntry",
    "DiagnosticKind",
    "Diagnostic",
    "SyncReport",
    # Engine
    "SyncEngine",
    "SyncPlan",
    "SyncScope",
]
