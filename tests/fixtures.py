# tests/fixtures.py
"""
Helpers for building on-disk test data: settings files and throwaway
external plugins with their own modules, bundles and themes.
"""

import json
import textwrap
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

PLUGIN_MODULE_TEMPLATE = '''
from pathlib import Path

from colorblind_theme.core.i18n.message_bundle import MessageBundle
from colorblind_theme.core.project.project_manager import ProjectManagerListener

EVENTS = []

Bundle = MessageBundle("HelloBundle", Path(__file__).parent / "messages")


class HelloService:
    instances = []

    def __init__(self, project):
        self.project = project
        self.disposed = False
        HelloService.instances.append(self)

    def dispose(self):
        self.disposed = True


class HelloListener(ProjectManagerListener):

    def project_opened(self, project):
        EVENTS.append(("opened", project.name))
        project.service(HelloService)

    def project_closed(self, project):
        EVENTS.append(("closed", project.name))
'''

HELLO_THEME = {
    "id": "hello-contrast",
    "name": "Hello Contrast",
    "dark": True,
    "colors": {"background": "#000000", "foreground": "#FFFFFF"},
    "ui": {"Panel.background": "background", "Label.foreground": "foreground"},
}


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    return path


def make_external_plugin(
    parent: Path,
    plugin_id: str = "org.example.hello",
    since_build: str = "200",
    until_build: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Create `<parent>/<dir>/plugin.json` plus a uniquely named module.
    Returns {"root", "module", "descriptor"}.
    """
    module = f"hello_ext_{uuid.uuid4().hex}"
    root = parent / plugin_id.replace(".", "_")
    root.mkdir(parents=True, exist_ok=True)
    (root / f"{module}.py").write_text(textwrap.dedent(PLUGIN_MODULE_TEMPLATE), encoding="utf-8")
    write_json(root / "messages" / "HelloBundle.json", {"hello": "Hello, {0}!"})
    write_json(root / "messages" / "HelloBundle_de.json", {"hello": "Hallo, {0}!"})
    write_json(root / "themes" / "hello.theme.json", HELLO_THEME)

    descriptor = {
        "id": plugin_id,
        "name": "Hello Plugin",
        "version": "0.1.0",
        "vendor": "example",
        "since_build": since_build,
        "resource_bundle": f"{module}:Bundle",
        "project_listeners": [f"{module}.HelloListener"],
        "project_services": [{"implementation": f"{module}.HelloService"}],
        "themes": ["themes/hello.theme.json"],
    }
    if until_build:
        descriptor["until_build"] = until_build
    descriptor.update(extra or {})
    write_json(root / "plugin.json", descriptor)
    return {"root": root, "module": module, "descriptor": descriptor}
