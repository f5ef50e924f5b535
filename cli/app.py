"""
cli/app.py - 메인 CLI 엔트리포인트

Click 기반의 CLI 애플리케이션 진입점입니다.
Azure 테이블 플러그인을 로컬 호스트(QueryRunner)로 실행합니다.

명령어 구조:
    azt tables                      # 테이블 목록
    azt inspect <table>             # 컬럼/키 컬럼 정보
    azt query <table> [옵션]        # 테이블 쿼리
    azt --version                   # 버전 표시

    예시:
    azt query azure_network_watcher -l 10
    azt query azure_lb -w name=my-lb -w resource_group=my-rg -f json
    azt query azure_subscription -c prod -c dev -C id,display_name,state

Usage:
    # 명령줄에서 직접 실행
    $ azt tables

    # 모듈로 실행
    $ python -m cli.app
"""

import logging

import click
from click import Context

from cli.ui.console import configure_logging, print_table
from core.config import get_version
from core.exceptions import TableNotFoundError
from shared.azure.tables import plugin

logger = logging.getLogger(__name__)

VERSION = get_version()

OUTPUT_FORMATS = ["table", "json", "csv"]


def _parse_quals(values: tuple[str, ...]) -> dict[str, str]:
    """-w col=value 옵션 → {col: value}"""
    quals: dict[str, str] = {}
    for value in values:
        column, sep, expected = value.partition("=")
        if not sep or not column.strip():
            raise click.BadParameter(f"'컬럼=값' 형식이어야 합니다: {value}", param_hint="-w/--where")
        quals[column.strip()] = expected.strip()
    return quals


def _parse_columns(value: str | None) -> list[str] | None:
    if not value:
        return None
    columns = [c.strip() for c in value.split(",") if c.strip()]
    return columns or None


@click.group()
@click.version_option(VERSION, prog_name="azt")
@click.option("-v", "--verbose", is_flag=True, help="DEBUG 로그 출력")
@click.pass_context
def cli(ctx: Context, verbose: bool) -> None:
    """AZT - Azure 리소스 테이블 CLI

    Azure 구독의 리소스를 테이블 형태로 조회합니다.
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command("tables")
def list_tables() -> None:
    """사용 가능한 테이블 목록"""
    rows = [[table.name, table.description] for table in plugin().tables()]
    print_table("Azure 테이블", ["테이블", "설명"], rows)


@cli.command("inspect")
@click.argument("table_name")
def inspect_table(table_name: str) -> None:
    """테이블 컬럼과 Get 키 컬럼 표시"""
    try:
        table = plugin().table(table_name)
    except TableNotFoundError as e:
        raise click.ClickException(str(e)) from e

    rows = [[c.name, c.type.value, c.description] for c in table.columns]
    print_table(table.name, ["컬럼", "타입", "설명"], rows)

    if table.get_config is not None:
        click.echo(f"Get 키 컬럼: {', '.join(table.get_config.key_columns.columns)}")
    if table.list_config is not None and table.list_config.parent_hydrate is not None:
        click.echo(f"부모 목록: {table.list_config.parent_hydrate.__name__}")


@cli.command("query")
@click.argument("table_name")
@click.option("-w", "--where", "where", multiple=True, help="equality 조건 (컬럼=값, 다중 가능)")
@click.option("-l", "--limit", type=click.IntRange(min=0), default=None, help="최대 행 수")
@click.option("-C", "--columns", default=None, help="출력 컬럼 (쉼표 구분)")
@click.option("-c", "--connection", "connections", multiple=True, help="연결 이름 (다중 가능, 기본: 전체)")
@click.option("-f", "--format", "output_format", type=click.Choice(OUTPUT_FORMATS), default="table")
@click.option("-o", "--output", default=None, help="출력 파일 경로")
@click.option("--config", "config_path", default=None, help="연결 설정 파일 (기본: ~/.azt/config.yaml)")
@click.option("-q", "--quiet", is_flag=True, help="경고/요약 메시지 생략")
def query(
    table_name: str,
    where: tuple[str, ...],
    limit: int | None,
    columns: str | None,
    connections: tuple[str, ...],
    output_format: str,
    output: str | None,
    config_path: str | None,
    quiet: bool,
) -> None:
    """테이블 쿼리 실행"""
    from cli.headless import run_headless

    exit_code = run_headless(
        table=table_name,
        connections=list(connections),
        quals=_parse_quals(where),
        limit=limit,
        columns=_parse_columns(columns),
        format=output_format,
        output=output,
        config_path=config_path,
        quiet=quiet,
    )
    raise SystemExit(exit_code)


if __name__ == "__main__":
    cli()
