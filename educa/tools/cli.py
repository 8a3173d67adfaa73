"""
Command line client for the platform.

Usage examples:
    educa register --role student --name "Ana" --email ana@escola.br --grade "5° Ano"
    educa login admin@educa.com
    educa users --status PENDING
    educa approve <user-id>
    educa whoami

Every invocation performs the two-phase startup (hydrate, then restore the
session) against the configured store, so the session survives between
commands exactly like it survives a restart.

Recovery:
    An unexpected error offers to clear all stored data and start over from
    the seeded state. `educa reset` does the same on request.
"""
from __future__ import annotations

import logging
from typing import Optional

import click

from educa.bootstrap import Platform, load_environment, reset_all, start
from educa.identity_access.domain import (
    LearningStyle,
    Role,
    SchoolGrade,
    Student,
    Subject,
    UserStatus,
    new_user,
)
from educa.identity_access.gate import AdminAction, Verdict, decide, landing_view
from educa.identity_access.sessions import RegistrationOutcome
from educa.storage.config import build_store
from educa.storage.ports import StorageUnavailable

logger = logging.getLogger("educa.cli")

_GRADES = [g.value for g in SchoolGrade]
_SUBJECTS = [s.value for s in Subject]
_STYLES = [s.value for s in LearningStyle]


def _offer_reset(platform: Optional[Platform]) -> None:
    if not click.confirm("An unexpected error occurred. Clear all data and reload?", default=False):
        return
    if platform is not None:
        reset_all(platform)
    else:
        try:
            build_store().clear()
        except StorageUnavailable as exc:
            click.echo(f"Reset failed: {exc}", err=True)
            return
    click.echo("All data cleared.")


class _RecoveringGroup(click.Group):
    """Group that turns unexpected errors into the reset prompt."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except (click.ClickException, click.Abort, click.exceptions.Exit):
            raise
        except Exception as exc:
            logger.exception("cli.unhandled_error")
            click.echo(f"Error: {exc}", err=True)
            _offer_reset(ctx.obj if isinstance(ctx.obj, Platform) else None)
            raise click.Abort() from exc


def _platform(ctx: click.Context) -> Platform:
    return ctx.obj


def _require_admin(platform: Platform):
    user = platform.sessions.current_user
    if decide(user) is not Verdict.ALLOW or user.role is not Role.ADMIN:
        raise click.ClickException("Administrator session required (educa login admin@educa.com).")
    return user


def _require_authorized(platform: Platform):
    user = platform.sessions.current_user
    verdict = decide(user)
    if verdict is Verdict.ALLOW:
        return user
    if verdict is Verdict.DENY_UNAUTHENTICATED:
        raise click.ClickException("Not logged in.")
    if verdict is Verdict.DENY_PENDING:
        raise click.ClickException("Account awaiting administrator approval.")
    raise click.ClickException("Account is not active.")


def _describe(user) -> str:
    return f"{user.id}  {user.role.value:<7}  {user.status.value:<9}  {user.name} <{user.email}>"


@click.group(cls=_RecoveringGroup, context_settings={"help_option_names": ["-h", "--help"]})
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Educa platform client."""
    load_environment()
    ctx.obj = start()


@cli.command()
@click.option("--role", type=click.Choice(["student", "teacher"], case_sensitive=False), required=True)
@click.option("--name", required=True)
@click.option("--email", required=True)
@click.option("--grade", type=click.Choice(_GRADES), help="Student grade.")
@click.option("--learning-style", type=click.Choice(_STYLES), help="Student learning style.")
@click.option("--teaching-grade", "teaching_grades", multiple=True, type=click.Choice(_GRADES))
@click.option("--teaching-subject", "teaching_subjects", multiple=True, type=click.Choice(_SUBJECTS))
@click.pass_context
def register(ctx, role, name, email, grade, learning_style, teaching_grades, teaching_subjects):
    """Create a student (logged in immediately) or a teacher (pending approval)."""
    role = Role(role.upper())
    if role is Role.STUDENT:
        fields = {"grade": grade, "learning_style": learning_style}
    else:
        fields = {"teaching_grades": teaching_grades, "teaching_subjects": teaching_subjects}
    user = new_user(role, name=name.strip(), email=email.strip(), **fields)
    outcome = _platform(ctx).sessions.register(user)
    if outcome is RegistrationOutcome.DUPLICATE_EMAIL:
        raise click.ClickException(f"Email already registered: {user.email}")
    if outcome is RegistrationOutcome.PENDING_APPROVAL:
        click.echo(f"Registered {user.name}; awaiting administrator approval.")
    else:
        click.echo(f"Registered and logged in as {user.name}.")


@cli.command()
@click.argument("email")
@click.pass_context
def login(ctx, email):
    platform = _platform(ctx)
    if not platform.sessions.login(email):
        raise click.ClickException(f"No account for {email}.")
    user = platform.sessions.current_user
    click.echo(f"Logged in as {user.name} ({user.role.value}); view: {landing_view(user).value}")


@cli.command()
@click.pass_context
def logout(ctx):
    _platform(ctx).sessions.logout()
    click.echo("Logged out.")


@cli.command()
@click.pass_context
def whoami(ctx):
    """Show the current user and which screen the gate would show."""
    user = _platform(ctx).sessions.current_user
    if user is None:
        click.echo("Not logged in.")
        return
    click.echo(_describe(user))
    click.echo(f"verdict: {decide(user).value}  view: {landing_view(user).value}")


@cli.command()
@click.option("--query", "-q", default=None, help="Filter by name or email.")
@click.option("--status", type=click.Choice([s.value for s in UserStatus], case_sensitive=False))
@click.pass_context
def users(ctx, query, status):
    """List accounts (administrator only)."""
    platform = _platform(ctx)
    _require_admin(platform)
    items = platform.repo.search_users(query) if query else platform.repo.users
    if status:
        items = [u for u in items if u.status is UserStatus(status.upper())]
    for user in items:
        click.echo(_describe(user))


def _status_command(action: AdminAction):
    @click.argument("user_id")
    @click.pass_context
    def command(ctx, user_id):
        platform = _platform(ctx)
        actor = _require_admin(platform)
        if platform.repo.get_user(user_id) is None:
            raise click.ClickException(f"Unknown user: {user_id}")
        if not platform.admin.apply(actor, user_id, action):
            raise click.ClickException(f"Cannot {action.value} {user_id} from its current status.")
        click.echo(_describe(platform.repo.get_user(user_id)))

    command.__doc__ = f"{action.value.capitalize()} an account (administrator only)."
    return cli.command(name=action.value)(command)


for _action in AdminAction:
    _status_command(_action)


@cli.command()
@click.option("--subject", type=click.Choice(_SUBJECTS), default=None)
@click.option("--grade", type=click.Choice(_GRADES), default=None, help="Ignored for students.")
@click.pass_context
def materials(ctx, subject, grade):
    """List materials; students see their own grade."""
    platform = _platform(ctx)
    user = _require_authorized(platform)
    if isinstance(user, Student):
        grade = user.grade.value if user.grade is not None else None
        if grade is None:
            return
    for item in platform.repo.materials:
        if grade and item.grade.value != grade:
            continue
        if subject and item.subject.value != subject:
            continue
        click.echo(f"{item.id}  [{item.type.value}] {item.title}  ({item.grade.value}, {item.subject.value})")


@cli.command()
@click.option("--subject", type=click.Choice(_SUBJECTS), default=None)
@click.option("--grade", type=click.Choice(_GRADES), default=None, help="Ignored for students.")
@click.pass_context
def assignments(ctx, subject, grade):
    """List assignments; students see their own grade."""
    platform = _platform(ctx)
    user = _require_authorized(platform)
    if isinstance(user, Student):
        grade = user.grade.value if user.grade is not None else None
        if grade is None:
            return
    for item in platform.repo.assignments:
        if grade and item.grade.value != grade:
            continue
        if subject and item.subject.value != subject:
            continue
        click.echo(f"{item.id}  {item.title}  due {item.due_date}  ({len(item.questions)} questions)")


@cli.command()
@click.confirmation_option(prompt="Clear all stored data and reload the defaults?")
@click.pass_context
def reset(ctx):
    ctx.obj = reset_all(_platform(ctx))
    click.echo("All data cleared.")


if __name__ == "__main__":  # pragma: no cover
    cli()
