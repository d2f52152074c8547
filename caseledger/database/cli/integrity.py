"""
Integrity Commands
------------------

Scan, repair and inspect cross-entity integrity of a guild.

Commands:
    - scan: Report integrity issues of a guild
    - repair: Apply automatic repairs to a guild
    - validate: Check a single record
    - rules: List validation rules
    - health: Summarize record counts and integrity status of a guild
"""
import json
import click

from caseledger.core.logging_manager import handle_cli_error
from caseledger.core.exceptions import ConfigError, DatabaseError, RepairError
from caseledger.database.models import EntityType
from . import get_db

SEVERITY_ICONS = {"critical": "🔴", "warning": "🟡", "info": "🔵"}


def _echo_issue(issue) -> None:
    icon = SEVERITY_ICONS.get(issue.severity.value, "•")
    fixable = " [auto-repair]" if issue.is_repairable else ""
    click.echo(
        f"  {icon} {issue.entity_type.value} {issue.entity_id}: {issue.message}{fixable}"
    )


def _echo_report(report) -> None:
    click.echo(f"\n🔍 Integrity Scan: guild {report.guild_id}")
    click.echo("=" * 50)
    click.echo(f"Status: {report.status.upper()}")
    click.echo(f"Entities scanned: {report.total_entities_scanned}")

    if not report.issues:
        click.echo("\n✅ No integrity issues found!")
        return

    counts = report.issues_by_severity
    click.echo(
        f"\n⚠️  Issues Found ({len(report.issues)}): "
        f"{counts['critical']} critical, {counts['warning']} warning, {counts['info']} info"
    )
    for issue in report.issues:
        _echo_issue(issue)
    click.echo(f"\n🔧 Auto-repairable: {report.repairable_issues}")


@click.command()
@click.argument("guild_id")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.option("--deep", is_flag=True, help="Include guild-wide checks")
@click.option("--lenient", is_flag=True, help="Skip advisory rules")
@click.pass_context
def scan(ctx, guild_id, as_json, deep, lenient):
    """Scan a guild for integrity issues."""
    try:
        db = get_db(ctx)
        level = "lenient" if lenient else "strict"
        with db.session_scope():
            if deep:
                report = db.integrity.perform_deep_integrity_check(guild_id, level)
            else:
                report = db.integrity.scan_for_integrity_issues(guild_id, level)

        if as_json:
            click.echo(json.dumps(report.to_dict(), indent=2, default=str))
        else:
            _echo_report(report)

    except (DatabaseError, ConfigError) as e:
        handle_cli_error(ctx, e, "scan", {"deep": deep, "lenient": lenient}, guild_id=guild_id)


@click.command()
@click.argument("guild_id")
@click.option("--dry-run", is_flag=True, help="Show what would be repaired")
@click.option("--deep", is_flag=True, help="Include guild-wide checks")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def repair(ctx, guild_id, dry_run, deep, yes):
    """Repair auto-repairable integrity issues of a guild."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            if deep:
                report = db.integrity.perform_deep_integrity_check(guild_id)
            else:
                report = db.integrity.scan_for_integrity_issues(guild_id)

        if report.repairable_issues == 0:
            click.echo(
                f"✅ Nothing to repair ({len(report.issues)} issue(s), none auto-repairable)"
            )
            return

        if not dry_run and not yes:
            click.confirm(
                f"Apply {report.repairable_issues} repair(s) to guild {guild_id}?",
                abort=True,
            )

        # Repair actions carry ids only, so they apply in a fresh session
        with db.session_scope():
            result = db.integrity.repair_integrity_issues(list(report.issues), dry_run=dry_run)

        title = "🧪 Dry Run" if dry_run else "🔧 Repair"
        click.echo(f"\n{title}: guild {guild_id}")
        click.echo("=" * 50)
        for issue in result.repaired_issues:
            click.echo(f"  ✓ {issue.repair_action.describe()}")
        for failure in result.failed_repairs:
            click.echo(f"  ✗ {failure.issue.message}: {failure.error}")

        verb = "Would repair" if dry_run else "Repaired"
        click.echo(
            f"\n{verb}: {result.issues_repaired}, failed: {result.issues_failed}, "
            f"skipped: {result.issues_skipped}"
        )

    except (DatabaseError, RepairError, ConfigError) as e:
        handle_cli_error(
            ctx, e, "repair", {"dry_run": dry_run, "deep": deep}, guild_id=guild_id
        )


@click.command()
@click.argument("entity_type", type=click.Choice(EntityType.choices()))
@click.argument("entity_id", type=int)
@click.pass_context
def validate(ctx, entity_type, entity_id):
    """Validate a single record."""
    try:
        db = get_db(ctx)
        issues = None
        with db.session_scope():
            record = db.accessors.for_type(entity_type).find_by_id(entity_id)
            if record is not None:
                issues = db.integrity.validate_before_operation(record, entity_type, "update")

        if issues is None:
            click.echo(f"❌ {entity_type} {entity_id} not found", err=True)
            ctx.exit(1)

        if not issues:
            click.echo(f"✅ {entity_type} {entity_id}: no issues")
            return

        click.echo(f"⚠️  {entity_type} {entity_id}: {len(issues)} issue(s)")
        for issue in issues:
            _echo_issue(issue)

    except (DatabaseError, ConfigError) as e:
        handle_cli_error(
            ctx, e, "validate", entity_type=entity_type, entity_id=entity_id
        )


@click.command()
@click.option(
    "--entity-type",
    type=click.Choice(EntityType.choices()),
    help="Only rules for this entity type",
)
@click.option("--json", "as_json", is_flag=True, help="Print the rules as JSON")
@click.pass_context
def rules(ctx, entity_type, as_json):
    """List validation rules in evaluation order."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            if entity_type:
                selected = db.integrity.get_rules_for(entity_type)
            else:
                selected = [
                    rule
                    for et in EntityType
                    for rule in db.integrity.get_rules_for(et)
                ]

        if as_json:
            click.echo(json.dumps([rule.to_dict() for rule in selected], indent=2))
            return

        click.echo(f"\n📋 Validation Rules ({len(selected)})")
        click.echo("=" * 50)
        for rule in selected:
            flag = " (strict only)" if rule.strict_only else ""
            click.echo(
                f"  [{rule.priority:>3}] {rule.entity_type.value:<12} {rule.name}{flag}"
            )
            click.echo(f"        {rule.description}")
            if rule.dependencies:
                click.echo(f"        depends on: {', '.join(rule.dependencies)}")

    except (DatabaseError, ConfigError) as e:
        handle_cli_error(ctx, e, "rules")


@click.command()
@click.argument("guild_id")
@click.pass_context
def health(ctx, guild_id):
    """Summarize record counts and integrity status of a guild."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            counts = db.guild_statistics(guild_id)
            report = db.integrity.perform_deep_integrity_check(guild_id)

        click.echo(f"\n🏥 Guild Health: {guild_id}")
        click.echo("=" * 50)
        click.echo(f"Status: {report.status.upper()}")

        click.echo("\nRecords:")
        for name, count in counts.items():
            click.echo(f"  {name}: {count}")

        if report.issues:
            click.echo("\nIssues by type:")
            for name, count in sorted(report.issues_by_entity_type.items()):
                click.echo(f"  • {name}: {count}")

            recommendations = []
            if report.repairable_issues:
                recommendations.append(
                    f"Run 'caseledger repair {guild_id}' to fix "
                    f"{report.repairable_issues} issue(s)"
                )
            manual = len(report.issues) - report.repairable_issues
            if manual:
                recommendations.append(
                    f"Review {manual} issue(s) with 'caseledger scan {guild_id}'"
                )
            click.echo(f"\n💡 Recommendations ({len(recommendations)}):")
            for rec in recommendations:
                click.echo(f"  • {rec}")
        else:
            click.echo("\n✅ No issues found!")

    except (DatabaseError, ConfigError) as e:
        handle_cli_error(ctx, e, "health", guild_id=guild_id)
