from pathlib import Path

import pytest


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def react_project(tmp_path: Path) -> Path:
    """
    A small React project:

    src/components/Navbar/Logo.tsx   Logo (navbar)
    src/components/Footer/Logo.jsx   Logo (footer)
    src/pages/Home.tsx               Home, renders and imports Logo
    src/utils/format.ts              formatDate
    src/Button.test.tsx              excluded from extraction
    node_modules/lib/index.js        never scanned
    """
    root = tmp_path / "proj"
    _write(root / "package.json", '{"name": "proj"}\n')
    _write(
        root / "src" / "components" / "Navbar" / "Logo.tsx",
        "export default function Logo() {\n  return <img src='logo.svg' />;\n}\n",
    )
    _write(
        root / "src" / "components" / "Footer" / "Logo.jsx",
        "export default function Logo() {\n  return <span>small logo</span>;\n}\n",
    )
    _write(
        root / "src" / "pages" / "Home.tsx",
        "import Logo from '../components/Navbar/Logo';\n"
        "\n"
        "export default function Home() {\n"
        "  return <main><Logo /></main>;\n"
        "}\n",
    )
    _write(root / "src" / "utils" / "format.ts", "export function formatDate(d) {\n  return d;\n}\n")
    _write(root / "src" / "Button.test.tsx", "export default function ButtonTest() {}\n")
    _write(root / "node_modules" / "lib" / "index.js", "export default function Lib() {}\n")
    return root
