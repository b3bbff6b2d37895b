"""命令行入口：`python -m kaleido_scope` / `kaleido-scope`。"""

from __future__ import annotations

import argparse
import asyncio
import importlib
import json
from pathlib import Path
import sys
from typing import Any, Sequence

from packaging.version import InvalidVersion, Version

from kaleido_scope import constants as cst


def _default_env_content() -> str:
    return (
        "# kaleido-scope 配置\n"
        "KALEIDO_SCOPE_DEBUG=false\n"
        "\n"
        "# 拒绝估算会卡死导出器的请求\n"
        "KALEIDO_SCOPE_SAFE_MODE=false\n"
        "\n"
        "# 引擎默认 config（figure.config 可覆盖）\n"
        "KALEIDO_SCOPE_MAPBOX_ACCESS_TOKEN=\n"
        "KALEIDO_SCOPE_TOPOJSON_URL=\n"
        f"KALEIDO_SCOPE_PLOT_GL_PIXEL_RATIO={cst.PLOT_GL_PIXEL_RATIO}\n"
        "\n"
        "# pdf/eps 预览面加载超时（秒）\n"
        f"KALEIDO_SCOPE_PDF_PAGE_LOAD_TIMEOUT={cst.PDF_PAGE_LOAD_IMG_TIMEOUT}\n"
        "\n"
        "# serve 模式\n"
        "KALEIDO_SCOPE_HOST=127.0.0.1\n"
        "KALEIDO_SCOPE_PORT=9091\n"
    )


def _detect_render_backend() -> tuple[bool, str]:
    """检查 render / serve 出图所需的 kaleido 后端。

    kaleido 0.x 自带 Chromium；1.x 通过 choreographer 调用本机 Chrome。
    """
    try:
        kaleido = importlib.import_module("kaleido")
    except ImportError:
        return False, "未安装 kaleido，render / serve 无法出图（pip install kaleido）"

    version = str(getattr(kaleido, "__version__", "unknown"))
    try:
        bundles_chromium = Version(version).major < 1
    except InvalidVersion:
        bundles_chromium = False
    if bundles_chromium:
        return True, f"kaleido {version}（内置 Chromium）"

    try:
        chromium = importlib.import_module("choreographer.browsers.chromium")
        chrome_path = chromium.get_browser_path(chromium.chromium_based_browsers)
    except (ImportError, AttributeError, OSError, RuntimeError) as exc:
        return False, f"kaleido {version}：无法定位 Chrome（{exc}），可运行 `kaleido_get_chrome` 安装"

    if not chrome_path:
        return False, f"kaleido {version}：未找到 Chrome，可运行 `kaleido_get_chrome` 安装"
    return True, f"kaleido {version}，Chrome: {chrome_path}"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="kaleido-scope - 图表导出请求校验与渲染编排")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="启动 HTTP 导出服务")
    serve_parser.add_argument("--host", default=None, help="监听地址")
    serve_parser.add_argument("--port", type=int, default=None, help="监听端口")
    serve_parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="日志级别",
    )
    serve_parser.set_defaults(func=_cmd_serve)

    validate_parser = subparsers.add_parser("validate", help="校验导出请求 JSON 文件")
    validate_parser.add_argument("request", type=Path, help="请求文件路径（JSON）")
    _add_export_options(validate_parser)
    validate_parser.set_defaults(func=_cmd_validate)

    profile_parser = subparsers.add_parser("profile", help="查看 plotly.js 版本对应的能力档位")
    profile_parser.add_argument("version", help="plotly.js 版本号，如 1.58.5")
    profile_parser.add_argument(
        "--format",
        dest="export_format",
        choices=sorted(cst.CONTENT_FORMAT),
        default=None,
        help="检查该版本能否导出指定格式",
    )
    profile_parser.set_defaults(func=_cmd_profile)

    render_parser = subparsers.add_parser("render", help="使用 plotly.py 自带引擎导出图表")
    render_parser.add_argument("request", type=Path, help="请求文件路径（JSON）")
    render_parser.add_argument("-o", "--output", type=Path, required=True, help="输出文件路径")
    _add_export_options(render_parser)
    render_parser.set_defaults(func=_cmd_render)

    doctor_parser = subparsers.add_parser("doctor", help="检查运行环境")
    doctor_parser.set_defaults(func=_cmd_doctor)

    init_parser = subparsers.add_parser("init", help="生成配置文件")
    init_parser.add_argument(
        "--env-file",
        default=".env",
        help="配置文件路径，默认当前目录 .env",
    )
    init_parser.add_argument("--force", action="store_true", help="覆盖已存在的配置文件")
    init_parser.set_defaults(func=_cmd_init)

    return parser


def _add_export_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        dest="export_format",
        choices=sorted(cst.CONTENT_FORMAT),
        default=None,
        help="导出格式（简写请求时生效）",
    )
    parser.add_argument("--width", type=float, default=None, help="宽度（像素）")
    parser.add_argument("--height", type=float, default=None, help="高度（像素）")
    parser.add_argument("--scale", type=float, default=None, help="缩放倍数")
    parser.add_argument("--safe-mode", action="store_true", help="拒绝可能卡死导出器的请求")


def _load_request(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _export_options(args: argparse.Namespace) -> dict[str, Any]:
    opts: dict[str, Any] = {}
    if args.export_format:
        opts["format"] = args.export_format
    for key in ("width", "height", "scale"):
        value = getattr(args, key)
        if value is not None:
            opts[key] = value
    return opts


def _cmd_serve(args: argparse.Namespace) -> int:
    try:
        import uvicorn
    except ImportError:
        print("缺少依赖，请先运行: pip install -e .")
        return 1

    from kaleido_scope.config import settings

    uvicorn.run(
        "kaleido_scope.app:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=args.log_level,
    )
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    from kaleido_scope.scope.parse import parse

    try:
        body = _load_request(args.request)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"错误：无法读取请求文件: {exc}")
        return 1

    parsed = parse(body, _export_options(args), safe_mode=args.safe_mode)
    if not parsed.ok or parsed.result is None:
        print(json.dumps({"code": int(parsed.code), "message": parsed.message}, ensure_ascii=False))
        return 1

    request = parsed.result
    summary = {
        "code": 0,
        "format": request.format,
        "content_type": cst.content_type_for(request.format),
        "width": request.width,
        "height": request.height,
        "scale": request.scale,
        "encoded": request.encoded,
        "fid": request.fid,
        "traces": len(request.figure.data),
    }
    print(json.dumps(summary, ensure_ascii=False, indent=2))
    return 0


def _cmd_profile(args: argparse.Namespace) -> int:
    from kaleido_scope.scope.version_gate import resolve_profile

    profile = resolve_profile(args.version)
    print(f"plotly.js {args.version}: {profile.value}")
    if not profile.can_render:
        print(cst.STATUS_MSG[cst.StatusCode.UNSUPPORTED_ENGINE_VERSION])
        return 1
    if args.export_format == "json" and not profile.supports_full_json:
        print(cst.STATUS_MSG[cst.StatusCode.UNSUPPORTED_FORMAT_FOR_VERSION])
        return 1
    return 0


def _cmd_render(args: argparse.Namespace) -> int:
    from kaleido_scope.engines import PlotlyEngine
    from kaleido_scope.scope.plotly_scope import PlotlyScope
    from kaleido_scope.utils.payload import decode_payload

    try:
        body = _load_request(args.request)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"错误：无法读取请求文件: {exc}")
        return 1

    opts = _export_options(args)
    if opts.get("format") == "emf" or (isinstance(body, dict) and body.get("format") == "emf"):
        print(f"错误：{cst.STATUS_MSG[cst.StatusCode.UNACCEPTABLE_FORMAT]} (emf)")
        return 1

    scope = PlotlyScope(PlotlyEngine(), safe_mode=args.safe_mode or None)
    response = asyncio.run(scope.export(body, opts))
    if not response.ok or response.result is None:
        print(f"错误：[{response.code}] {response.message}")
        return 1

    args.output.write_bytes(decode_payload(response.result, response.format))
    print(f"✓ 已导出到 {args.output}（{response.format}，{response.width}x{response.height}）")
    return 0


def _cmd_doctor(args: argparse.Namespace) -> int:
    from kaleido_scope.scope.version_gate import resolve_profile

    checks: list[tuple[str, bool, str, bool]] = []

    py_ok = sys.version_info >= (3, 10)
    checks.append(
        (
            "Python 版本 >= 3.10",
            py_ok,
            f"当前: {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
            True,
        )
    )

    try:
        from kaleido_scope.engines.plotly_engine import bundled_plotlyjs_version

        version = bundled_plotlyjs_version()
        profile = resolve_profile(version)
        checks.append(
            ("plotly.js 版本", profile.can_render, f"{version}（{profile.value}）", True)
        )
    except ImportError as exc:
        checks.append(("plotly.js 版本", False, f"plotly 未安装（{exc}）", True))

    kaleido_ok, kaleido_msg = _detect_render_backend()
    checks.append(("出图后端（render / serve，可选）", kaleido_ok, kaleido_msg, False))

    print("kaleido-scope 环境检查:")
    failed = 0
    for name, ok, detail, required in checks:
        mark = "OK" if ok else "FAIL"
        if not required and not ok:
            mark = "WARN"
        print(f"- [{mark}] {name}: {detail}")
        if required and not ok:
            failed += 1

    if failed == 0:
        print("检查通过。")
        return 0

    print(f"检查完成：{failed} 项失败，请先修复。")
    return 1


def _cmd_init(args: argparse.Namespace) -> int:
    env_path = Path(args.env_file).expanduser().resolve()
    if env_path.exists() and not args.force:
        print(f"配置文件已存在: {env_path}")
        print("如需覆盖请添加 --force")
        return 1

    env_path.parent.mkdir(parents=True, exist_ok=True)
    env_path.write_text(_default_env_content(), encoding="utf-8")
    print(f"已生成配置文件: {env_path}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else sys.argv[1:])
    try:
        return int(args.func(args))
    except KeyboardInterrupt:
        print("已中断。")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
