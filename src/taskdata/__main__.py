"""
任务资源命令行工具

  python -m taskdata check resource/tasks.json [overlay.json ...]
  python -m taskdata show Roguelike@StartExplore --file resource/tasks.json
  python -m taskdata templates --file resource/tasks.json
  python -m taskdata serve
"""
import argparse
import json
import sys
from typing import List, Optional

from .core.config import settings
from .modules.tasks.errors import TaskDataError, TaskValidationError
from .modules.tasks.registry import TaskRegistry


def _load(files: List[str], strict: bool) -> TaskRegistry:
    registry = TaskRegistry(strict=strict)
    registry.load_files(files or settings.task_file_list)
    return registry


def cmd_check(args) -> int:
    try:
        registry = _load(args.files, strict=True)
    except TaskValidationError as e:
        for issue in e.errors:
            print(f"[ERROR] {issue}")
        print(f"\n校验失败: {len(e.errors)} 个问题")
        return 1
    except TaskDataError as e:
        print(f"[ERROR] {e}")
        return 1
    print(f"校验通过: {len(registry)} 个任务，{len(registry.get_templ_required())} 个模板")
    return 0


def cmd_show(args) -> int:
    try:
        registry = _load(args.file, strict=False)
        task_info = registry.get(args.name)
    except TaskDataError as e:
        print(f"[ERROR] {e}")
        return 1
    print(json.dumps(task_info.to_dict(), ensure_ascii=False, indent=2))
    return 0


def cmd_templates(args) -> int:
    try:
        registry = _load(args.file, strict=False)
    except TaskDataError as e:
        print(f"[ERROR] {e}")
        return 1
    for name in sorted(registry.get_templ_required()):
        print(name)
    return 0


def cmd_serve(args) -> int:
    import uvicorn

    uvicorn.run("taskdata.main:app", host=args.host, port=args.port, log_level="info")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskdata", description="任务资源解析工具")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("check", help="严格模式加载并校验资源")
    p.add_argument("files", nargs="*", help="资源文件（按顺序叠加），缺省使用 TASK_FILES")
    p.set_defaults(func=cmd_check)

    p = sub.add_parser("show", help="输出解析后的任务")
    p.add_argument("name")
    p.add_argument("--file", action="append", default=[], help="资源文件，可重复")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("templates", help="列出所需模板文件")
    p.add_argument("--file", action="append", default=[], help="资源文件，可重复")
    p.set_defaults(func=cmd_templates)

    p = sub.add_parser("serve", help="启动查询服务")
    p.add_argument("--host", default=settings.api_host)
    p.add_argument("--port", type=int, default=settings.api_port)
    p.set_defaults(func=cmd_serve)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
