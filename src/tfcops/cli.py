"""
tfc-ops command line.

Usage:
    tfc-ops workspaces list -o acme -a name,terraform-version
    tfc-ops workspaces clone -o acme -s app-prod -n app-staging --copy-variables
    tfc-ops workspaces update -o acme -w app- -a terraform-version -v 1.5.7
    tfc-ops workspaces consumers add -o acme -w network --consumers app-prod,app-staging
    tfc-ops workspaces run-triggers add -o acme -w app-prod -s network
    tfc-ops variables list -o acme -k region --csv
    tfc-ops variables add -o acme -w app-prod -k region -v us-east-1
    tfc-ops variables update -o acme -s region -n eu-west-1
    tfc-ops variables delete -o acme -w app-prod -k region
    tfc-ops varsets apply -o acme -s shared-aws --workspace-filter app-
    tfc-ops varsets list -o acme -w app-prod

Every command accepts ``-r/--read-only-mode``: all reads and decisions happen
and are printed, but nothing is changed.
"""

import argparse
import csv
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, TextIO

from tfcops.api import TfcApiV2, WorkspaceApi
from tfcops.config import OpsSettings, load_settings
from tfcops.context import ClientContext
from tfcops.errors import ConfigurationError, InvalidSpecificationError, TfcOpsError
from tfcops.executors import (
    CloneExecutor,
    ExecutionResult,
    RunTriggerExecutor,
    VariableExecutor,
    VariableSetExecutor,
    VariableUpdateExecutor,
    WorkspaceExecutor,
)
from tfcops.models import (
    WORKSPACE_LIST_ATTRIBUTES,
    WORKSPACE_UPDATE_ATTRIBUTES,
    CloneSpecification,
    RunTriggerDirection,
    Variable,
    VariableUpdateSpecification,
    Workspace,
    WorkspaceUpdateSpecification,
    workspace_names,
)
from tfcops.models.workspaces import WORKSPACE_LIST_ATTRIBUTES_DEPRECATED

logger = logging.getLogger(__name__)

ApiFactory = Callable[[ClientContext], WorkspaceApi]


@dataclass
class CommandContext:
    """What a command handler needs besides its arguments."""

    settings: OpsSettings
    api_factory: ApiFactory
    confirm: Callable[[str], bool]
    out: TextIO

    @property
    def organization(self) -> str:
        if not self.settings.organization:
            raise ConfigurationError("--organization is required")
        return self.settings.organization

    @property
    def read_only(self) -> bool:
        return self.settings.read_only

    def api(self) -> WorkspaceApi:
        return self.api_factory(self.settings.context())

    def print(self, message: str = "") -> None:
        print(message, file=self.out)


def prompt_confirm(workspace_name: str) -> bool:
    """Ask on the terminal whether to change ``workspace_name``."""
    answer = input(f"Apply the change to workspace '{workspace_name}'? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _print_results(ctx: CommandContext, results: List[ExecutionResult]) -> None:
    for result in results:
        ctx.print(str(result))


# =============================================================================
# WORKSPACES
# =============================================================================

def cmd_workspaces_list(args: argparse.Namespace, ctx: CommandContext) -> int:
    labels = _split(args.attributes)
    for label in labels:
        if label.lower() in WORKSPACE_LIST_ATTRIBUTES_DEPRECATED:
            ctx.print(f"DEPRECATION: attribute '{label}' is deprecated and will be removed in a future version")
        elif label.lower() not in WORKSPACE_LIST_ATTRIBUTES:
            raise InvalidSpecificationError(f"'{label}' is not a valid workspace attribute")

    rows = WorkspaceExecutor(ctx.api()).list_attributes(ctx.organization, labels)
    for row in rows:
        ctx.print(", ".join(row))
    return 0


def cmd_workspaces_clone(args: argparse.Namespace, ctx: CommandContext) -> int:
    spec = CloneSpecification(
        organization=ctx.organization,
        source_workspace=args.source_workspace,
        new_workspace=args.new_workspace,
        new_organization=args.new_organization,
        new_vcs_token_id=args.new_vcs_token_id,
        copy_state=args.copy_state,
        copy_variables=args.copy_variables,
        apply_variable_sets=args.apply_variable_sets,
        different_destination_account=args.different_destination_account,
    )
    if ctx.read_only:
        ctx.print("read-only mode enabled, no workspace will be created")

    source_context = ctx.settings.context()
    destination_context = None
    destination_api = None
    if spec.different_destination_account:
        destination_context = ctx.settings.destination_context()
        destination_api = ctx.api_factory(destination_context)

    executor = CloneExecutor(
        ctx.api_factory(source_context),
        dry_run=ctx.read_only,
        destination_api=destination_api,
        source_context=source_context,
        destination_context=destination_context,
    )
    result = executor.clone(spec)
    _print_results(ctx, result.results)

    ctx.print("\n  **** Completed Cloning ****")
    if result.sensitive_vars:
        ctx.print(f"Sensitive variables for {spec.destination_organization}:{spec.new_workspace}")
        for key in result.sensitive_vars:
            ctx.print(key)
    return 0


def cmd_workspaces_update(args: argparse.Namespace, ctx: CommandContext) -> int:
    spec = WorkspaceUpdateSpecification(
        organization=ctx.organization,
        workspace_filter=args.workspace,
        attribute=args.attribute,
        value=args.value,
    )
    executor = WorkspaceExecutor(ctx.api(), dry_run=ctx.read_only, continue_on_error=True)
    results = executor.update_attribute(spec)
    _print_results(ctx, results)
    ctx.print(executor.get_summary())
    return 0 if all(r.success for r in results) else 1


def cmd_consumers_list(args: argparse.Namespace, ctx: CommandContext) -> int:
    consumers = WorkspaceExecutor(ctx.api()).list_consumers(ctx.organization, args.workspace)
    ctx.print(f"Workspace {args.workspace} has {len(consumers)} remote state consumer(s)")
    for ws in consumers:
        ctx.print(f"  {ws.name}")
    return 0


def _consumers_change(action: str) -> Callable[[argparse.Namespace, CommandContext], int]:
    def handler(args: argparse.Namespace, ctx: CommandContext) -> int:
        executor = WorkspaceExecutor(ctx.api(), dry_run=ctx.read_only)
        change = {
            "add": executor.add_consumers,
            "update": executor.update_consumers,
            "delete": executor.remove_consumers,
        }[action]
        result = change(ctx.organization, args.workspace, _split(args.consumers))
        ctx.print(str(result))
        return 0
    return handler


def cmd_run_triggers_list(args: argparse.Namespace, ctx: CommandContext) -> int:
    api = ctx.api()
    ws = WorkspaceExecutor(api).find_by_name(ctx.organization, args.workspace)
    triggers = RunTriggerExecutor(api).list(ws.id, RunTriggerDirection(args.type))
    ctx.print(f"Workspace {ws.name} has {len(triggers)} {args.type} run trigger(s)")
    for trigger in triggers:
        ctx.print(f"  {trigger.source_name} -> {trigger.workspace_name}")
    return 0


def cmd_run_triggers_add(args: argparse.Namespace, ctx: CommandContext) -> int:
    api = ctx.api()
    directory = WorkspaceExecutor(api)
    ws = directory.find_by_name(ctx.organization, args.workspace)
    source = directory.find_by_name(ctx.organization, args.source_workspace)
    result = RunTriggerExecutor(api, dry_run=ctx.read_only).create(ws, source)
    ctx.print(str(result))
    return 0


# =============================================================================
# VARIABLES
# =============================================================================

def _target_workspaces(args: argparse.Namespace, ctx: CommandContext, api: WorkspaceApi) -> List[Workspace]:
    directory = WorkspaceExecutor(api)
    if args.workspace:
        return [directory.find_by_name(ctx.organization, args.workspace)]
    return directory.list_all(ctx.organization)


def _print_variables(ctx: CommandContext, workspace: str, variables: List[Variable], as_csv: bool) -> None:
    if not variables:
        return
    if as_csv:
        writer = csv.writer(ctx.out, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for var in variables:
            writer.writerow([workspace, var.key, var.display_value()])
        return
    ctx.print()
    ctx.print(f"Workspace: {workspace} has {len(variables)} matching variable(s)")
    width = max(len(var.key) for var in variables)
    for var in variables:
        ctx.print(f"  {var.key.ljust(width)} | {var.display_value()}")


def cmd_variables_list(args: argparse.Namespace, ctx: CommandContext) -> int:
    if not args.key_contains and not args.value_contains:
        raise InvalidSpecificationError("at least one of --key-contains or --value-contains is required")
    api = ctx.api()
    workspaces = _target_workspaces(args, ctx, api)
    found = VariableExecutor(api).search_all(workspaces, args.key_contains or "", args.value_contains or "")
    for name, variables in found.items():
        _print_variables(ctx, name, variables, args.csv)
    return 0


def cmd_variables_add(args: argparse.Namespace, ctx: CommandContext) -> int:
    api = ctx.api()
    workspaces = _target_workspaces(args, ctx, api)
    if not args.workspace:
        ctx.print(f"Adding variable with key '{args.key}' to all workspaces...")
    executor = VariableExecutor(api, dry_run=ctx.read_only)
    for ws in workspaces:
        result = executor.add_if_absent(ws, Variable(key=args.key, value=args.value))
        ctx.print(str(result))
    return 0


def cmd_variables_update(args: argparse.Namespace, ctx: CommandContext) -> int:
    spec = VariableUpdateSpecification(
        organization=ctx.organization,
        workspace=args.workspace,
        search_string=args.variable_search_string,
        new_value=args.new_variable_value,
        search_on_value=args.search_on_variable_value,
        add_if_missing=args.add_key_if_not_found,
        sensitive=args.sensitive_variable,
    )
    executor = VariableUpdateExecutor(
        ctx.api(),
        dry_run=ctx.read_only,
        continue_on_error=args.continue_on_error,
        lenient_collisions=args.lenient,
    )
    results = executor.run(spec, confirm=ctx.confirm)
    _print_results(ctx, results)
    return 0 if all(r.success for r in results) else 1


def cmd_variables_delete(args: argparse.Namespace, ctx: CommandContext) -> int:
    api = ctx.api()
    workspaces = _target_workspaces(args, ctx, api)
    executor = VariableExecutor(api, dry_run=ctx.read_only)
    for ws in workspaces:
        result = executor.delete_by_key(ws, args.key)
        if result is None:
            if args.workspace:
                ctx.print(f"Variable {args.key} not found in workspace {ws.name}")
            continue
        ctx.print(str(result))
    return 0


# =============================================================================
# VARIABLE SETS
# =============================================================================

def _varset_workspaces(args: argparse.Namespace, ctx: CommandContext, api: WorkspaceApi) -> List[Workspace]:
    directory = WorkspaceExecutor(api)
    if args.workspace:
        return [directory.find_by_name(ctx.organization, args.workspace)]
    workspaces = directory.find_by_filter(ctx.organization, args.workspace_filter)
    if not workspaces:
        raise InvalidSpecificationError(f"no workspaces match the filter '{args.workspace_filter}'")
    return workspaces


def cmd_varsets_apply(args: argparse.Namespace, ctx: CommandContext) -> int:
    api = ctx.api()
    workspaces = _varset_workspaces(args, ctx, api)
    executor = VariableSetExecutor(api, dry_run=ctx.read_only)
    varset = executor.find_by_name(ctx.organization, args.set)
    ctx.print(f"Applying variable set '{varset.name}' to {workspace_names(workspaces)}")
    result = executor.apply_to_workspaces(varset, workspaces)
    ctx.print(str(result))
    return 0


def cmd_varsets_list(args: argparse.Namespace, ctx: CommandContext) -> int:
    api = ctx.api()
    workspaces = _varset_workspaces(args, ctx, api)
    executor = VariableSetExecutor(api)
    for ws in workspaces:
        ctx.print(f"Workspace {ws.name} has the following variable sets:")
        for varset in executor.list_applied_to(ws.id):
            ctx.print(f"  {varset.name}")
    return 0


# =============================================================================
# PARSER
# =============================================================================

def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--organization",
        "-o",
        help="Name of the Terraform Cloud organization (required unless set in the config file)",
    )
    common.add_argument(
        "--read-only-mode",
        "-r",
        action="store_const",
        const=True,
        default=None,
        help="Read and report only; make no changes",
    )
    common.add_argument(
        "--debug",
        action="store_const",
        const=True,
        default=None,
        help="Log API request and response bodies",
    )
    common.add_argument(
        "--verbose",
        action="store_true",
        help="Log each step",
    )
    common.add_argument(
        "--config",
        type=Path,
        help="Settings file (default: ~/.tfc-ops.yaml)",
    )
    common.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Do not ask before changing each workspace",
    )
    return common


def build_parser() -> argparse.ArgumentParser:
    common = _common_options()
    parser = argparse.ArgumentParser(
        prog="tfc-ops",
        description="Bulk operations on Terraform Cloud workspaces, variables and variable sets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    # workspaces ---------------------------------------------------------------
    workspaces = commands.add_parser("workspaces", help="Workspace operations")
    ws_commands = workspaces.add_subparsers(dest="workspaces_command", metavar="COMMAND")
    ws_commands.required = True

    ws_list = ws_commands.add_parser("list", parents=[common], help="List workspaces and attributes")
    ws_list.add_argument(
        "--attributes",
        "-a",
        required=True,
        help="Comma-separated attributes: " + ", ".join(
            k for k in WORKSPACE_LIST_ATTRIBUTES if k not in WORKSPACE_LIST_ATTRIBUTES_DEPRECATED
        ),
    )
    ws_list.set_defaults(handler=cmd_workspaces_list)

    clone = ws_commands.add_parser("clone", parents=[common], help="Clone a workspace")
    clone.add_argument("--source-workspace", "-s", required=True, help="Name of the source workspace")
    clone.add_argument("--new-workspace", "-n", required=True, help="Name of the new workspace")
    clone.add_argument("--new-organization", "-p", help="Destination organization (different account)")
    clone.add_argument("--new-vcs-token-id", "-v", help="Destination organization's VCS oauth-token-id")
    clone.add_argument(
        "--copy-state",
        "-t",
        action="store_true",
        help="Copy the source state (different account only)",
    )
    clone.add_argument(
        "--copy-variables",
        "-c",
        action="store_true",
        help="Copy variable values instead of placeholders",
    )
    clone.add_argument(
        "--apply-variable-sets",
        action="store_true",
        help="Apply the source's variable sets to the new workspace (same account only)",
    )
    clone.add_argument(
        "--different-destination-account",
        "-d",
        action="store_true",
        help="Clone to a different account (uses ATLAS_TOKEN_DESTINATION)",
    )
    clone.set_defaults(handler=cmd_workspaces_clone)

    update = ws_commands.add_parser("update", parents=[common], help="Update an attribute on matching workspaces")
    update.add_argument(
        "--attribute",
        "-a",
        required=True,
        help="Attribute to update: " + ", ".join(sorted(WORKSPACE_UPDATE_ATTRIBUTES)),
    )
    update.add_argument("--value", "-v", required=True, help="New value ('null' clears it)")
    update.add_argument("--workspace", "-w", required=True, help="Workspace name filter (at least 3 characters)")
    update.set_defaults(handler=cmd_workspaces_update)

    consumers = ws_commands.add_parser("consumers", help="Remote state consumers")
    consumer_commands = consumers.add_subparsers(dest="consumers_command", metavar="COMMAND")
    consumer_commands.required = True
    for action, help_text in (
        ("add", "Add remote state consumers"),
        ("update", "Replace remote state consumers"),
        ("delete", "Delete remote state consumers"),
    ):
        sub = consumer_commands.add_parser(action, parents=[common], help=help_text)
        sub.add_argument("--workspace", "-w", required=True, help="Workspace whose state is consumed")
        sub.add_argument("--consumers", required=True, help="Comma-separated consumer workspace names")
        sub.set_defaults(handler=_consumers_change(action))
    consumers_list = consumer_commands.add_parser("list", parents=[common], help="List remote state consumers")
    consumers_list.add_argument("--workspace", "-w", required=True, help="Workspace whose state is consumed")
    consumers_list.set_defaults(handler=cmd_consumers_list)

    triggers = ws_commands.add_parser("run-triggers", help="Run triggers")
    trigger_commands = triggers.add_subparsers(dest="run_triggers_command", metavar="COMMAND")
    trigger_commands.required = True
    trigger_add = trigger_commands.add_parser("add", parents=[common], help="Add a run trigger")
    trigger_add.add_argument("--workspace", "-w", required=True, help="Workspace to trigger")
    trigger_add.add_argument("--source-workspace", "-s", required=True, help="Workspace whose runs trigger it")
    trigger_add.set_defaults(handler=cmd_run_triggers_add)
    trigger_list = trigger_commands.add_parser("list", parents=[common], help="List run triggers")
    trigger_list.add_argument("--workspace", "-w", required=True, help="Workspace name")
    trigger_list.add_argument(
        "--type",
        choices=[d.value for d in RunTriggerDirection],
        default=RunTriggerDirection.INBOUND.value,
        help="inbound (default) or outbound",
    )
    trigger_list.set_defaults(handler=cmd_run_triggers_list)

    # variables ----------------------------------------------------------------
    variables = commands.add_parser("variables", help="Variable operations")
    var_commands = variables.add_subparsers(dest="variables_command", metavar="COMMAND")
    var_commands.required = True

    var_list = var_commands.add_parser("list", parents=[common], help="Search variables")
    var_list.add_argument("--workspace", "-w", help="Workspace name (default: all workspaces)")
    var_list.add_argument("--key-contains", "-k", help="Partial key to match")
    var_list.add_argument("--value-contains", "-v", help="Partial value to match")
    var_list.add_argument("--csv", action="store_true", help="Output CSV (workspace, key, value)")
    var_list.set_defaults(handler=cmd_variables_list)

    var_add = var_commands.add_parser("add", parents=[common], help="Add a new variable")
    var_add.add_argument("--workspace", "-w", help="Workspace name (default: all workspaces)")
    var_add.add_argument("--key", "-k", required=True, help="Variable key, must not exist yet")
    var_add.add_argument("--value", "-v", required=True, help="Variable value")
    var_add.set_defaults(handler=cmd_variables_add)

    var_update = var_commands.add_parser("update", parents=[common], help="Update or add a variable")
    var_update.add_argument("--workspace", "-w", help="Workspace name (default: all workspaces)")
    var_update.add_argument(
        "--variable-search-string",
        "-s",
        required=True,
        help="Key (or value with -v) to match, complete and case-insensitive",
    )
    var_update.add_argument("--new-variable-value", "-n", required=True, help="New value")
    var_update.add_argument(
        "--add-key-if-not-found",
        "-a",
        action="store_true",
        help="Add the variable if no key matches",
    )
    var_update.add_argument(
        "--search-on-variable-value",
        "-v",
        action="store_true",
        help="Match on value instead of key (not with -a)",
    )
    var_update.add_argument("--sensitive-variable", "-x", action="store_true", help="Make the variable sensitive")
    var_update.add_argument(
        "--lenient",
        action="store_true",
        help="Skip, instead of failing on, workspaces where -a finds an existing key",
    )
    var_update.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Report failures and continue with the next workspace",
    )
    var_update.set_defaults(handler=cmd_variables_update)

    var_delete = var_commands.add_parser("delete", parents=[common], help="Delete a variable")
    var_delete.add_argument("--workspace", "-w", help="Workspace name (default: all workspaces)")
    var_delete.add_argument("--key", "-k", required=True, help="Variable key, must match exactly")
    var_delete.set_defaults(handler=cmd_variables_delete)

    # varsets ------------------------------------------------------------------
    varsets = commands.add_parser("varsets", help="Variable set operations")
    varset_commands = varsets.add_subparsers(dest="varsets_command", metavar="COMMAND")
    varset_commands.required = True

    for name, handler, help_text in (
        ("apply", cmd_varsets_apply, "Apply a variable set to workspaces"),
        ("list", cmd_varsets_list, "List variable sets applied to workspaces"),
    ):
        sub = varset_commands.add_parser(name, parents=[common], help=help_text)
        target = sub.add_mutually_exclusive_group(required=True)
        target.add_argument("--workspace", "-w", help="Workspace name")
        target.add_argument("--workspace-filter", help="Partial workspace name")
        if name == "apply":
            sub.add_argument("--set", "-s", required=True, help="Name of the variable set")
        sub.set_defaults(handler=handler)

    return parser


def configure_logging(verbose: bool, debug: bool) -> None:
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(
    argv: Optional[List[str]] = None,
    api_factory: Optional[ApiFactory] = None,
    confirm: Optional[Callable[[str], bool]] = None,
    out: Optional[TextIO] = None,
) -> int:
    """Entry point; returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(
            config_path=args.config,
            overrides={
                "organization": args.organization,
                "read_only": args.read_only_mode,
                "debug": args.debug,
            },
        )
        configure_logging(args.verbose, settings.debug)
        ctx = CommandContext(
            settings=settings,
            api_factory=api_factory or TfcApiV2.from_context,
            confirm=(lambda _name: True) if args.yes else (confirm or prompt_confirm),
            out=out or sys.stdout,
        )
        return args.handler(args, ctx)
    except TfcOpsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
