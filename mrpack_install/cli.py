"""
CLI 模块

命令行接口实现。
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional

import click
import toml
import yaml
from loguru import logger

from mrpack_install import __version__
from mrpack_install.exceptions import ConfigParseError, MrpackInstallError
from mrpack_install.logger import setup_logger
from mrpack_install.models import InstallConfig
from mrpack_install.orchestrator import InstallOrchestrator
from mrpack_install.paths import resolve_path


def load_config(config_path: str) -> Dict[str, Any]:
    """加载配置文件 (toml / json / yaml)"""
    path = resolve_path(config_path)

    if not path.is_file():
        raise ConfigParseError(f"配置文件不存在: {config_path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            data = toml.load(str(path))
        elif suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        else:
            raise ConfigParseError(f"不支持的配置文件格式: {suffix}")
    except (OSError, ValueError, toml.TomlDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(
            f"解析配置文件 {config_path} 失败: {e}", context={"path": str(path)}
        )

    return data or {}


def build_config(config_path: Optional[str], **overrides) -> InstallConfig:
    """合并配置文件与命令行选项，命令行优先"""
    data = load_config(config_path) if config_path else {}
    if not isinstance(data, dict):
        raise ConfigParseError(f"配置文件 {config_path} 顶层必须是键值表")
    data.update({k: v for k, v in overrides.items() if v is not None})
    return InstallConfig.from_dict(data)


async def run_async(
    mrpack_path: Path, server_path: Path, config: InstallConfig
) -> None:
    """异步运行"""
    orchestrator = InstallOrchestrator(mrpack_path, server_path, config)
    report = await orchestrator.run()
    if report is not None and report.skipped:
        logger.warning(f"跳过了 {len(report.skipped)} 个文件")


@click.command()
@click.argument("mrpack", metavar="<path-to-mrpack>")
@click.argument("server", metavar="<path-to-server>")
@click.option(
    "-c", "--config", "config_path", help="配置文件路径 (toml / json / yaml)"
)
@click.option("-y", "--yes", "assume_yes", is_flag=True, help="跳过确认")
@click.option(
    "-j",
    "--concurrency",
    "max_concurrent",
    type=int,
    help="最大并发下载数（默认 1），也是内存中等待写入的下载上限",
)
@click.option("--retries", "max_retries", type=int, help="下载失败重试次数（默认 0）")
@click.option("--timeout", type=float, help="单次请求超时秒数（默认 30）")
@click.option(
    "--keep-going",
    is_flag=True,
    help="网络或写入错误时跳过该文件而不是终止",
)
@click.option(
    "--overrides",
    is_flag=True,
    help="同时解压 overrides/ 与 server-overrides/",
)
@click.option(
    "--skip-existing",
    is_flag=True,
    help="目标文件已存在且校验通过时不再下载",
)
@click.option("--debug", is_flag=True, help="启用调试模式")
@click.version_option(version=__version__)
def main(
    mrpack: str,
    server: str,
    config_path: Optional[str],
    assume_yes: bool,
    max_concurrent: Optional[int],
    max_retries: Optional[int],
    timeout: Optional[float],
    keep_going: bool,
    overrides: bool,
    skip_existing: bool,
    debug: bool,
):
    """把 .mrpack 整合包中服务端需要的文件安装到服务端目录"""
    setup_logger(level="DEBUG" if debug else None)

    try:
        config = build_config(
            config_path,
            assume_yes=assume_yes or None,
            max_concurrent=max_concurrent,
            max_retries=max_retries,
            timeout=timeout,
            keep_going=keep_going or None,
            overrides=overrides or None,
            skip_existing=skip_existing or None,
        )
        server_path = resolve_path(server)
        mrpack_path = resolve_path(mrpack)
        asyncio.run(run_async(mrpack_path, server_path, config))
    except MrpackInstallError as e:
        exc = click.ClickException(str(e))
        exc.exit_code = e.exit_code
        raise exc


if __name__ == "__main__":
    main()
