"""Application configuration defaults and the optional docscope.yml loader."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from docscope.embedding.encoder import DEFAULT_MODEL
from docscope.errors import ConfigError

CONFIG_FILENAME = "docscope.yml"
ROOT_LOCALE = "root"
TRAILING_SLASH_MODES = ("always", "never", "ignore")


@dataclass(slots=True)
class LocaleConfig:
    label: str
    lang: str


@dataclass(slots=True)
class SidebarGroupConfig:
    """A sidebar group autogenerated from one topic directory."""

    label: str
    directory: str


def _default_locales() -> Dict[str, LocaleConfig]:
    return {
        ROOT_LOCALE: LocaleConfig(label="English", lang="en"),
        "fr": LocaleConfig(label="Français", lang="fr"),
    }


@dataclass(slots=True)
class AppConfig:
    content_root: Path = Path("src/content/docs")
    locales: Dict[str, LocaleConfig] = field(default_factory=_default_locales)
    default_locale: str = ROOT_LOCALE
    base: str = "/convention"
    trailing_slash: str = "always"
    extensions: Tuple[str, ...] = (".md", ".mdx")
    sidebar: List[SidebarGroupConfig] = field(default_factory=list)
    db_path: Path | None = None
    model_name: str = DEFAULT_MODEL
    chunk_chars: int = 1200
    overlap: int = 200

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = Path(".docscope/catalog.db")
        if self.default_locale not in self.locales:
            raise ConfigError(f"Default locale {self.default_locale!r} is not a configured locale")
        if self.trailing_slash not in TRAILING_SLASH_MODES:
            raise ConfigError(
                f"trailing_slash must be one of {', '.join(TRAILING_SLASH_MODES)}, "
                f"got {self.trailing_slash!r}"
            )
        if self.chunk_chars < 1:
            raise ConfigError("chunk_chars must be at least 1")
        if not 0 <= self.overlap < self.chunk_chars:
            raise ConfigError(
                f"overlap must be between 0 and chunk_chars - 1 ({self.chunk_chars - 1}), "
                f"got {self.overlap}"
            )

    @property
    def default_lang(self) -> str:
        return self.locales[self.default_locale].lang

    @property
    def langs(self) -> List[str]:
        """Language codes of every configured locale, default first."""
        ordered = [self.default_lang]
        for key, locale in self.locales.items():
            if key != self.default_locale and locale.lang not in ordered:
                ordered.append(locale.lang)
        return ordered

    def locale_prefixes(self) -> Dict[str, str]:
        """Map content directory prefixes to the language they hold."""
        return {key: locale.lang for key, locale in self.locales.items() if key != ROOT_LOCALE}

    def prefix_for(self, lang: str) -> Optional[str]:
        """Return the URL/content prefix of a language, ``None`` for the root locale."""
        for key, locale in self.locales.items():
            if locale.lang == lang:
                return None if key == ROOT_LOCALE else key
        raise KeyError(lang)

    def resolve_content_root(self, base_dir: Path | None = None) -> Path:
        if self.content_root.is_absolute() or base_dir is None:
            return self.content_root
        return base_dir / self.content_root

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        if self.db_path is None:
            self.db_path = Path(".docscope/catalog.db")
        if Path(self.db_path).is_absolute() or base_dir is None:
            return Path(self.db_path)
        return base_dir / self.db_path


def load_config(config_path: Path) -> AppConfig:
    """Load configuration from ``docscope.yml``.

    ``config_path`` may point at the file itself or at the directory holding
    it. Relative paths in the file are resolved against that directory. A
    missing file yields the defaults rooted at the same directory.
    """
    config_path = Path(config_path).expanduser()
    config_file = config_path / CONFIG_FILENAME if config_path.is_dir() else config_path
    base_dir = config_file.parent.resolve()

    if not config_file.exists():
        config = AppConfig()
        config.content_root = config.resolve_content_root(base_dir)
        config.db_path = config.resolve_db_path(base_dir)
        return config

    data = _read_config(config_file)

    kwargs: Dict[str, Any] = {}
    if "content_root" in data:
        kwargs["content_root"] = base_dir / _require_str(data, "content_root")
    if "locales" in data:
        kwargs["locales"] = _parse_locales(data["locales"])
    if "default_locale" in data:
        kwargs["default_locale"] = _require_str(data, "default_locale")
    if "base" in data:
        kwargs["base"] = _require_str(data, "base")
    if "trailing_slash" in data:
        kwargs["trailing_slash"] = _require_str(data, "trailing_slash")
    if "extensions" in data:
        kwargs["extensions"] = tuple(_normalise_extension(ext) for ext in _as_str_list(data["extensions"]))
    if "sidebar" in data:
        kwargs["sidebar"] = _parse_sidebar(data["sidebar"])

    catalog = data.get("catalog") or {}
    if not isinstance(catalog, dict):
        raise ConfigError("'catalog' must be a mapping")
    if "db_path" in catalog:
        kwargs["db_path"] = base_dir / _require_str(catalog, "db_path")
    if "model" in catalog:
        kwargs["model_name"] = _require_str(catalog, "model")
    for key in ("chunk_chars", "overlap"):
        if key in catalog:
            value = catalog[key]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ConfigError(f"catalog.{key} must be a non-negative integer")
            kwargs[key] = value

    config = AppConfig(**kwargs)
    config.content_root = config.resolve_content_root(base_dir)
    config.db_path = config.resolve_db_path(base_dir)
    return config


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _parse_locales(value: Any) -> Dict[str, LocaleConfig]:
    if not isinstance(value, dict) or not value:
        raise ConfigError("'locales' must be a non-empty mapping")
    locales: Dict[str, LocaleConfig] = {}
    for key, entry in value.items():
        key = str(key)
        if entry is None:
            entry = {}
        if not isinstance(entry, dict):
            raise ConfigError(f"Locale {key!r} must be a mapping")
        lang = str(entry.get("lang") or key)
        label = str(entry.get("label") or lang)
        locales[key] = LocaleConfig(label=label, lang=lang)
    return locales


def _parse_sidebar(value: Any) -> List[SidebarGroupConfig]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError("'sidebar' must be a list of groups")
    groups: List[SidebarGroupConfig] = []
    for entry in value:
        if not isinstance(entry, dict):
            raise ConfigError("Sidebar groups must be mappings with 'label' and 'directory'")
        directory = entry.get("directory")
        if not isinstance(directory, str) or not directory.strip():
            raise ConfigError("Sidebar groups need a 'directory'")
        directory = directory.strip().strip("/")
        label = entry.get("label")
        groups.append(
            SidebarGroupConfig(
                label=str(label) if label else directory.capitalize(),
                directory=directory,
            )
        )
    return groups


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{key}' must be a non-empty string")
    return value


def _as_str_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    raise ConfigError("Expected a string or a list of strings")
