"""
mrpack 读取服务

负责打开 .mrpack 归档、提取 modrinth.index.json 并解析为结构化条目。
"""

import json
import re
import zipfile
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple, Union

from loguru import logger

from mrpack_install.exceptions import (
    ArchiveFormatError,
    ArchiveOpenError,
    ManifestDecodeError,
    ManifestFieldError,
    ManifestMissingError,
    ManifestParseError,
)
from mrpack_install.models import EnvSupport, ModEntry, ModpackIndex

MANIFEST_NAME = "modrinth.index.json"
OVERRIDE_FOLDERS = ("overrides", "server-overrides")

_SHA512_RE = re.compile(r"[0-9a-fA-F]{128}")


class MrpackArchive:
    """.mrpack 归档读取器"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._zip: zipfile.ZipFile

    def __enter__(self) -> "MrpackArchive":
        try:
            self._zip = zipfile.ZipFile(self.path)
        except zipfile.BadZipFile as e:
            raise ArchiveFormatError(
                f"'{self.path}' 不是有效的 mrpack (zip) 文件",
                context={"path": str(self.path), "error": str(e)},
            )
        except OSError as e:
            raise ArchiveOpenError(
                f"无法打开 mrpack 文件 '{self.path}'，请检查路径是否正确: {e}",
                context={"path": str(self.path)},
            )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._zip.close()

    def read_manifest(self) -> str:
        """读取 modrinth.index.json 的文本内容"""
        try:
            raw = self._zip.read(MANIFEST_NAME)
        except KeyError:
            raise ManifestMissingError(
                f"mrpack 文件中缺少 `{MANIFEST_NAME}`",
                context={"path": str(self.path)},
            )
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveFormatError(
                f"读取 `{MANIFEST_NAME}` 失败: {e}",
                context={"path": str(self.path)},
            )

        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ManifestDecodeError(
                f"`{MANIFEST_NAME}` 不是有效的 UTF-8 文本: {e}",
                context={"path": str(self.path)},
            )

    def iter_overrides(self) -> Iterator[Tuple[str, bytes]]:
        """
        依次产出 overrides/ 与 server-overrides/ 中的文件

        Yields:
            (相对于服务端根目录的路径, 文件内容)，server-overrides 在后，可覆盖前者
        """
        for folder in OVERRIDE_FOLDERS:
            prefix = f"{folder}/"
            for info in self._zip.infolist():
                if info.is_dir() or not info.filename.startswith(prefix):
                    continue
                relative = info.filename[len(prefix):]
                if relative:
                    yield relative, self._zip.read(info)


def extract_manifest(archive_path: Union[str, Path]) -> str:
    """打开归档并返回 modrinth.index.json 的文本内容"""
    with MrpackArchive(archive_path) as archive:
        return archive.read_manifest()


def _require(value: Any, kind: type, index: int, field_name: str) -> Any:
    if not isinstance(value, kind) or isinstance(value, bool):
        raise ManifestFieldError(
            f"files[{index}] 的字段 `{field_name}` 缺失或类型错误",
            context={"index": index, "field": field_name},
        )
    return value


def _parse_entry(index: int, raw: Any) -> ModEntry:
    raw = _require(raw, dict, index, "<entry>")

    env = _require(raw.get("env"), dict, index, "env")
    server_raw = _require(env.get("server"), str, index, "env.server")
    server = EnvSupport.parse(server_raw)
    if server is None:
        logger.warning(
            f"files[{index}] 的 env.server 取值未知 '{server_raw}'，按 unsupported 处理"
        )
        server = EnvSupport.UNSUPPORTED

    path = _require(raw.get("path"), str, index, "path")
    if not path.strip():
        raise ManifestFieldError(
            f"files[{index}] 的字段 `path` 为空",
            context={"index": index, "field": "path"},
        )

    hashes = _require(raw.get("hashes"), dict, index, "hashes")
    sha512 = _require(hashes.get("sha512"), str, index, "hashes.sha512")
    if not _SHA512_RE.fullmatch(sha512):
        raise ManifestFieldError(
            f"files[{index}] 的 `hashes.sha512` 不是 128 位十六进制字符串",
            context={"index": index, "field": "hashes.sha512", "path": path},
        )

    downloads = _require(raw.get("downloads"), list, index, "downloads")
    if not downloads:
        raise ManifestFieldError(
            f"files[{index}] 的 `downloads` 为空",
            context={"index": index, "field": "downloads", "path": path},
        )
    url = _require(downloads[0], str, index, "downloads[0]")

    file_size = raw.get("fileSize")
    if isinstance(file_size, bool) or not isinstance(file_size, int):
        file_size = None

    return ModEntry(
        path=path,
        sha512=sha512.lower(),
        url=url,
        server=server,
        file_size=file_size,
    )


def parse_index(text: str) -> ModpackIndex:
    """
    解析 modrinth.index.json

    任一条目缺少必需字段都会使整个清单解析失败，不会返回部分结果。

    Raises:
        ManifestParseError: 文本不是合法 JSON
        ManifestFieldError: 缺少 files 或条目字段缺失/类型错误
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ManifestParseError(f"解析 `{MANIFEST_NAME}` 失败: {e}")

    if not isinstance(data, dict):
        raise ManifestFieldError(f"`{MANIFEST_NAME}` 顶层必须是对象")

    files = data.get("files")
    if not isinstance(files, list):
        raise ManifestFieldError(
            f"`{MANIFEST_NAME}` 缺少数组字段 `files`", context={"field": "files"}
        )

    entries = [_parse_entry(i, raw) for i, raw in enumerate(files)]

    dependencies: Dict[str, str] = {}
    raw_dependencies = data.get("dependencies")
    if isinstance(raw_dependencies, dict):
        dependencies = {str(k): str(v) for k, v in raw_dependencies.items()}

    return ModpackIndex(
        name=str(data.get("name") or "Unknown Pack"),
        version_id=str(data.get("versionId") or ""),
        dependencies=dependencies,
        files=entries,
    )


def parse_manifest(text: str) -> List[ModEntry]:
    """解析清单文本，按源顺序返回全部条目"""
    return parse_index(text).files


def read_index(archive_path: Union[str, Path]) -> ModpackIndex:
    """提取并解析归档中的清单"""
    return parse_index(extract_manifest(archive_path))
