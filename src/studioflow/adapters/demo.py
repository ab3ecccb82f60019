"""Offline demo repository with simulated lazy-loaded content."""
import asyncio
import hashlib
import logging
from typing import List

from ..core.errors import NotFoundError
from ..core.models import Config, FileContent, RemoteEntry, TreeNode
from ..utils.tree_builder import FileTreeBuilder
from .base import RepositoryAdapter

logger = logging.getLogger(__name__)

DEMO_REPO_URL = "https://github.com/studioflow/demo"

DEMO_PATHS = [
    ("src", "tree"),
    ("src/components", "tree"),
    ("src/components/button.tsx", "blob"),
    ("src/components/input.tsx", "blob"),
    ("src/lib", "tree"),
    ("src/lib/utils.ts", "blob"),
    ("src/app", "tree"),
    ("src/app/page.tsx", "blob"),
    ("package.json", "blob"),
    ("README.md", "blob"),
]

SIMULATED_CONTENT = {
    "button.tsx": """import React from 'react';
import { cn } from '@/lib/utils';

interface ButtonProps extends React.ButtonHTMLAttributes<HTMLButtonElement> {
  variant?: 'default' | 'outline' | 'ghost';
  children: React.ReactNode;
}

export const Button: React.FC<ButtonProps> = ({ variant = 'default', className, children, ...props }) => {
  return (
    <button className={cn('rounded-md font-medium', variant === 'outline' && 'border', className)} {...props}>
      {children}
    </button>
  );
};
""",
    "input.tsx": """import React from 'react';
import { cn } from '@/lib/utils';

interface InputProps extends React.InputHTMLAttributes<HTMLInputElement> {
  error?: string;
}

export const Input = React.forwardRef<HTMLInputElement, InputProps>(
  ({ className, error, ...props }, ref) => (
    <div className="space-y-1">
      <input className={cn('h-10 w-full rounded-md border', error && 'border-destructive', className)} ref={ref} {...props} />
      {error && <p className="text-sm text-destructive">{error}</p>}
    </div>
  )
);
Input.displayName = 'Input';
""",
    "utils.ts": """import { type ClassValue, clsx } from 'clsx';
import { twMerge } from 'tailwind-merge';

export function cn(...inputs: ClassValue[]) {
  return twMerge(clsx(inputs));
}
""",
    "package.json": """{
  "name": "demo-project",
  "version": "1.0.0",
  "description": "A demo project showcasing lazy loading functionality",
  "scripts": {
    "dev": "next dev",
    "build": "next build"
  },
  "dependencies": {
    "next": "^14.0.0",
    "react": "^18.0.0",
    "clsx": "^2.0.0"
  }
}
""",
}


def _demo_sha(path: str) -> str:
    """Stable blob-like id for a demo path."""
    return hashlib.sha1(path.encode('utf-8')).hexdigest()


def simulate_file_content(file_path: str) -> str:
    """Deterministic stand-in content for a demo file."""
    file_name = file_path.split('/')[-1]
    if file_name in SIMULATED_CONTENT:
        return SIMULATED_CONTENT[file_name]
    return (
        f"// Simulated content for {file_path}\n"
        "// This content was lazy-loaded successfully!\n"
    )


class DemoAdapter(RepositoryAdapter):
    """Fallback dataset that behaves like a small remote repository."""

    def __init__(self, config: Config, repo_url: str = DEMO_REPO_URL):
        super().__init__(repo_url, config)
        self.branch = "main"
        self.entries = [RemoteEntry(path=path, kind=kind, id=_demo_sha(path))
                        for path, kind in DEMO_PATHS]
        self._paths = {entry.path for entry in self.entries if entry.kind == 'blob'}

    def get_name(self) -> str:
        return "demo"

    def fetch_tree(self) -> List[TreeNode]:
        return FileTreeBuilder.from_entries(self.entries)

    async def fetch_file_content(self, file_path: str, file_id: str) -> FileContent:
        path = file_path.lstrip('/')
        if path not in self._paths:
            raise NotFoundError(f"File not found: {file_path}")
        if self.config.demo_delay:
            await asyncio.sleep(self.config.demo_delay)
        content = simulate_file_content(path)
        logger.debug("Simulated %d bytes for %s", len(content), path)
        return FileContent(content=content, encoding='utf-8', size=len(content.encode('utf-8')))
