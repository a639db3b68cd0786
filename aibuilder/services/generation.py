# aibuilder/services/generation.py
"""
AI code generation seam.

``CodeGenerator`` is the extension point for a real model integration. The
shipped ``TemplateCodeGenerator`` fills canned templates so the rest of the
flow (ownership, optional save into the file tree) can be exercised today.
"""
import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..auth.guards import require_owned_project
from ..db.store import Store
from .errors import UnsupportedGenerationType
from .files import FileTreeService

log = logging.getLogger(__name__)

GENERATION_TYPES = ("file", "component", "feature", "full_app")


class CodeGenerator(ABC):
    @abstractmethod
    def generate(self, project: dict, prompt: str, generation_type: str,
                 file_path: Optional[str] = None) -> str:
        """Return source text for the request. generation_type is already validated."""


# ---------- templates ----------

_TS_TEMPLATE = """\
// Generated TypeScript module
// Prompt: {prompt}

export interface GeneratedOptions {{
  enabled: boolean;
  label?: string;
}}

export class GeneratedModule {{
  constructor(private readonly options: GeneratedOptions) {{}}

  run(): string {{
    return this.options.enabled ? `running ${{this.options.label ?? 'module'}}` : 'disabled';
  }}
}}

export default GeneratedModule;
"""

_JS_TEMPLATE = """\
// Generated JavaScript file
// Prompt: {prompt}

class GeneratedModule {{
  constructor(options = {{}}) {{
    this.options = options;
  }}

  run() {{
    return this.options.enabled ? 'running' : 'disabled';
  }}
}}

module.exports = GeneratedModule;
"""

_CSS_TEMPLATE = """\
/* Generated CSS */
/* Prompt: {prompt} */

.generated-container {{
  display: flex;
  flex-direction: column;
  gap: 1rem;
  padding: 1rem;
}}

@media (min-width: 768px) {{
  .generated-container {{
    flex-direction: row;
  }}
}}
"""

_GENERIC_TEMPLATE = """\
# Generated file

Generated content based on: {prompt}

## Features

- Placeholder content for {path}
"""

_COMPONENT_TEMPLATE = """\
// Generated React component
// Prompt: {prompt}
import React, {{ useState, useEffect }} from 'react';

interface GeneratedComponentProps {{
  title?: string;
}}

export const GeneratedComponent: React.FC<GeneratedComponentProps> = ({{ title = 'Generated' }}) => {{
  const [ready, setReady] = useState(false);

  useEffect(() => {{
    setReady(true);
  }}, []);

  return <div className="generated-component">{{ready ? title : 'Loading...'}}</div>;
}};

export default GeneratedComponent;
"""

_FEATURE_TEMPLATE = """\
// Generated feature
// Prompt: {prompt}

export interface FeatureConfig {{
  name: string;
  enabled: boolean;
}}

export interface FeatureResult {{
  success: boolean;
  message: string;
}}

export class GeneratedFeature {{
  constructor(private readonly config: FeatureConfig) {{}}

  async execute(): Promise<FeatureResult> {{
    if (!this.config.enabled) {{
      return {{ success: false, message: `${{this.config.name}} is disabled` }};
    }}
    return {{ success: true, message: `${{this.config.name}} executed` }};
  }}
}}
"""

_FULL_APP_TEMPLATE = """\
# {name}: Application Architecture Overview

Prompt: {prompt}

## src/App.tsx

import {{ BrowserRouter, Routes, Route }} from 'react-router-dom';

export default function App() {{
  return (
    <BrowserRouter>
      <Routes>
        <Route path="/" element={{<h1>{name}</h1>}} />
      </Routes>
    </BrowserRouter>
  );
}}

## src/services/ApiService.ts

export class ApiService {{
  constructor(private readonly baseUrl: string) {{}}
}}

## src/services/AuthService.ts

export class AuthService {{
  constructor(private readonly api: ApiService) {{}}
}}
"""


def _extension(file_path: Optional[str]) -> str:
    if not file_path:
        return ".js"
    return os.path.splitext(file_path)[1].lower()


class TemplateCodeGenerator(CodeGenerator):
    """Deterministic canned output keyed on generation type (and extension for files)."""

    def generate(self, project, prompt, generation_type, file_path=None):
        if generation_type == "file":
            ext = _extension(file_path)
            if ext in (".ts", ".tsx"):
                return _TS_TEMPLATE.format(prompt=prompt)
            if ext in (".js", ".jsx"):
                return _JS_TEMPLATE.format(prompt=prompt)
            if ext == ".css":
                return _CSS_TEMPLATE.format(prompt=prompt)
            return _GENERIC_TEMPLATE.format(prompt=prompt, path=file_path)
        if generation_type == "component":
            return _COMPONENT_TEMPLATE.format(prompt=prompt)
        if generation_type == "feature":
            return _FEATURE_TEMPLATE.format(prompt=prompt)
        if generation_type == "full_app":
            return _FULL_APP_TEMPLATE.format(prompt=prompt, name=project["name"])
        raise UnsupportedGenerationType(generation_type)


def simulated_delay(units: float, per_unit_ms: int, max_ms: int) -> None:
    """Sleep per_unit_ms for each unit, capped at max_ms. No-op when per_unit_ms is 0."""
    if per_unit_ms <= 0 or units <= 0:
        return
    time.sleep(min(units * per_unit_ms, max_ms) / 1000.0)


class GenerationService:
    def __init__(self, store: Store, generator: CodeGenerator,
                 delay_ms: int = 0, max_delay_ms: int = 2000):
        self.store = store
        self.generator = generator
        self.delay_ms = delay_ms
        self.max_delay_ms = max_delay_ms
        self.files = FileTreeService(store)

    def generate_with_ai(
        self,
        user_id: int,
        project_id: int,
        prompt: str,
        generation_type: str,
        file_path: Optional[str] = None,
    ) -> Dict[str, Any]:
        with self.store.atomic():
            project = require_owned_project(self.store, project_id, user_id)
            if generation_type not in GENERATION_TYPES:
                raise UnsupportedGenerationType(generation_type)

        # sleep outside the transaction
        simulated_delay(len(prompt) / 100.0, self.delay_ms, self.max_delay_ms)
        content = self.generator.generate(project, prompt, generation_type, file_path)

        if generation_type == "file":
            message = f"Generated file content for {file_path or 'new file'}"
        elif generation_type == "component":
            message = f'Generated component based on prompt: "{prompt}"'
        elif generation_type == "feature":
            message = f'Generated feature implementation based on prompt: "{prompt}"'
        else:
            message = f'Generated full application structure for project "{project["name"]}"'

        if file_path:
            with self.store.atomic():
                if self.store.find_file_by_path(project_id, file_path):
                    message += " - file already exists - content returned without saving"
                else:
                    self.files.create(user_id, project_id, file_path, content, "file")
                    message += " and saved to project"

        log.info("generated %s content for project %s", generation_type, project_id)
        return {"message": message, "generated_content": content}
