"""
命令行接口模块
============

提供设备校验、电压读取和配置上传的命令行界面。
"""

from .panel_cli import PanelPilotCLI

__all__ = ["PanelPilotCLI"]
