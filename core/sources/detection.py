"""
Static detection over a repository's file tree, manifests and README.

Pure functions; the GitHub client feeds them fetched content.
"""

import json
import logging
import re
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

JS_FRAMEWORK_MAP = {
    "react": "React",
    "react-dom": "React",
    "next": "Next.js",
    "vue": "Vue",
    "nuxt": "Nuxt",
    "angular": "Angular",
    "@angular/core": "Angular",
    "svelte": "Svelte",
    "express": "Express.js",
    "fastify": "Fastify",
    "koa": "Koa",
    "socket.io": "Socket.io",
    "redux": "Redux",
    "@reduxjs/toolkit": "Redux",
    "react-query": "React Query",
    "tailwindcss": "Tailwind CSS",
    "prisma": "Prisma",
    "@prisma/client": "Prisma",
    "graphql": "GraphQL",
    "apollo-server": "GraphQL",
    "@apollo/client": "GraphQL",
    "mongoose": "MongoDB",
    "mongodb": "MongoDB",
    "typeorm": "TypeORM",
    "sequelize": "Sequelize",
    "pg": "PostgreSQL",
    "mysql2": "MySQL",
    "jest": "Jest",
    "vitest": "Vitest",
    "cypress": "Cypress",
    "playwright": "Playwright",
    "webpack": "Webpack",
    "vite": "Vite",
    "electron": "Electron",
    "react-native": "React Native",
}

PY_LIB_MAP = {
    "django": "Django",
    "flask": "Flask",
    "fastapi": "FastAPI",
    "sqlalchemy": "SQLAlchemy",
    "pandas": "Pandas",
    "numpy": "NumPy",
    "scikit-learn": "Scikit-learn",
    "scikit_learn": "Scikit-learn",
    "tensorflow": "TensorFlow",
    "torch": "PyTorch",
    "keras": "Keras",
    "celery": "Celery",
    "redis": "Redis",
    "pytest": "pytest",
    "pydantic": "Pydantic",
    "httpx": "HTTPX",
    "requests": "Requests",
    "aiohttp": "aiohttp",
    "streamlit": "Streamlit",
    "langchain": "LangChain",
}

DEPLOYMENT_FILES = (
    "Dockerfile",
    "docker-compose.yml",
    "docker-compose.yaml",
    "vercel.json",
    ".vercel",
    "netlify.toml",
    "netlify.yml",
    ".netlify",
    "Procfile",
    "render.yaml",
    "render.yml",
    "railway.json",
    "railway.toml",
    "fly.toml",
    "heroku.yml",
    ".github/workflows/deploy.yml",
    ".github/workflows/deploy.yaml",
    ".github/workflows/ci-cd.yml",
    "kubernetes",
    "k8s",
    "helm",
    "serverless.yml",
    "serverless.yaml",
    "amplify.yml",
)

TEST_PATTERNS = (
    re.compile(r"^tests?/", re.I),
    re.compile(r"^__tests__/", re.I),
    re.compile(r"\.test\.[jt]sx?$"),
    re.compile(r"\.spec\.[jt]sx?$"),
    re.compile(r"(^|/)test_[^/]+\.py$"),
    re.compile(r"^jest\.config\."),
    re.compile(r"^vitest\.config\."),
    re.compile(r"^pytest\.ini$"),
    re.compile(r"^conftest\.py$"),
    re.compile(r"^cypress/", re.I),
    re.compile(r"^playwright\.config\."),
)

LIVE_URL_PATTERNS = (
    re.compile(r"https?://[^\s)]+\.vercel\.app[^\s)]*", re.I),
    re.compile(r"https?://[^\s)]+\.netlify\.app[^\s)]*", re.I),
    re.compile(r"https?://[^\s)]+\.railway\.app[^\s)]*", re.I),
    re.compile(r"https?://[^\s)]+\.onrender\.com[^\s)]*", re.I),
    re.compile(r"https?://[^\s)]+\.render\.com[^\s)]*", re.I),
    re.compile(r"https?://[^\s)]+\.fly\.dev[^\s)]*", re.I),
    re.compile(r"https?://[^\s)]+\.herokuapp\.com[^\s)]*", re.I),
    re.compile(r"\[(?:live demo|demo|app|try it|production)\]\((https?://[^)]+)\)", re.I),
)


def frameworks_from_package_json(content: Optional[str]) -> List[str]:
    if not content:
        return []
    try:
        package = json.loads(content)
    except ValueError:
        logger.debug("Malformed package.json, skipping framework detection")
        return []
    if not isinstance(package, dict):
        return []
    deps = {}
    deps.update(package.get("dependencies") or {})
    deps.update(package.get("devDependencies") or {})
    found = []
    for dep, label in JS_FRAMEWORK_MAP.items():
        if dep in deps and label not in found:
            found.append(label)
    return found


def frameworks_from_requirements(content: Optional[str]) -> List[str]:
    if not content:
        return []
    found = []
    for line in content.splitlines():
        name = re.split(r"[>=<!~;#\[\s]", line.strip(), maxsplit=1)[0].lower()
        if not name:
            continue
        label = PY_LIB_MAP.get(name) or PY_LIB_MAP.get(name.replace("-", "_"))
        if label and label not in found:
            found.append(label)
    return found


def has_test_files(paths: Iterable[str]) -> bool:
    return any(p.search(path) for path in paths for p in TEST_PATTERNS)


def has_deployment_config(paths: Iterable[str]) -> bool:
    for path in paths:
        for candidate in DEPLOYMENT_FILES:
            if path == candidate or path.startswith(candidate + "/"):
                return True
    return False


def detect_live_url(readme_text: Optional[str]) -> Optional[str]:
    if not readme_text:
        return None
    for pattern in LIVE_URL_PATTERNS:
        match = pattern.search(readme_text)
        if match:
            return match.group(1) if match.groups() else match.group(0)
    return None
