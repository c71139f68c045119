"""系统提示词加载工具。

按语言(locale) 从 prompts/<locale> 目录读取 system prompt 模板：

- company_context: 富数据层，注入 getCompanies 返回的公司数据。
- tools_context: 降级层，只列出可用工具名与说明。
"""

from functools import lru_cache
from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent


@lru_cache(maxsize=None)
def load_system_prompt(name: str, locale: str = "en") -> str:
    """根据模板名和语言加载系统提示词文本（去掉首尾空白）。"""

    fname = PROMPTS_DIR / locale / f"{name}.md"
    return fname.read_text(encoding="utf-8").strip()


def render_system_prompt(name: str, locale: str = "en", **values: str) -> str:
    return load_system_prompt(name, locale).format(**values)
