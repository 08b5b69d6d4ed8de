#!/usr/bin/env python3
"""
Panel Pilot 串口配置上传工具 - 模块CLI入口
=========================================

支持通过 python -m panel_pilot_transfer 或 panel-pilot 调用
"""

import sys
import argparse
import logging

from . import __version__
from .cli.panel_cli import PanelPilotCLI
from .config.constants import DEFAULT_BAUDRATE, HANDSHAKE_MODES
from .utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

PROGRAM_NAME = "Panel Pilot 配置上传工具"


def create_parser():
    """创建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        prog="panel-pilot",
        description=f"{PROGRAM_NAME} v{__version__}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例：
  # 列出串口
  panel-pilot ports

  # 校验设备
  panel-pilot verify --port /dev/ttyUSB0

  # 读取电压5次
  panel-pilot read --port COM3 --count 5

  # 上传配置文件
  panel-pilot upload --port COM3 --file "Panel Pilot SGD 24-M420.cfg"
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"{PROGRAM_NAME} v{__version__}"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    parser.add_argument("--log-file", help="同时将日志写入文件")

    subparsers = parser.add_subparsers(dest="command", help="可用命令")

    subparsers.add_parser("ports", help="列出可用串口")

    def add_port_args(sub):
        sub.add_argument("--port", help="串口号或URL（如 COM3, /dev/ttyUSB0）；不指定时交互选择")
        sub.add_argument(
            "--baudrate", type=int, default=DEFAULT_BAUDRATE,
            help=f"波特率（默认{DEFAULT_BAUDRATE}）",
        )

    verify_parser = subparsers.add_parser("verify", help="校验设备")
    add_port_args(verify_parser)

    read_parser = subparsers.add_parser("read", help="读取双通道电压")
    add_port_args(read_parser)
    read_parser.add_argument("--count", type=int, default=1, help="读取次数（默认1）")
    read_parser.add_argument("--interval", type=float, default=1.0, help="读取间隔秒数（默认1.0）")

    upload_parser = subparsers.add_parser("upload", help="通过XMODEM上传配置文件")
    add_port_args(upload_parser)
    upload_parser.add_argument("--file", required=True, help="配置文件路径")
    upload_parser.add_argument(
        "--handshake", choices=HANDSHAKE_MODES, default=None,
        help="进入上传模式后的握手方式（默认 invite：直接等待 'C'）",
    )

    return parser


def main(argv=None):
    """主函数"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
    )

    try:
        if args.command == "ports":
            PanelPilotCLI.show_available_ports()
            success = True
        elif args.command == "verify":
            success = PanelPilotCLI.verify(args.port, args.baudrate)
        elif args.command == "read":
            success = PanelPilotCLI.read(args.port, args.baudrate, args.count, args.interval)
        else:
            success = PanelPilotCLI.upload(args.port, args.baudrate, args.file, args.handshake)

        sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        print("\n\n👋 用户中断程序，退出")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"程序异常: {e}")
        print(f"\n💥 程序异常: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
