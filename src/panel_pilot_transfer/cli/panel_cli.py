"""
设备操作命令行接口
================

提供串口列表、设备校验、电压读取和配置上传的命令行接口。
"""

from pathlib import Path
from typing import Optional
import time

from ..config.settings import DeviceConfig, SerialConfig
from ..core.exceptions import PanelPilotError
from ..core.serial_manager import SerialManager
from ..transfer.session import SessionConfig, UploadSession
from ..utils.logger import get_logger
from ..utils.progress import ProgressBar

logger = get_logger(__name__)


class PanelPilotCLI:
    """设备操作命令行接口"""

    @staticmethod
    def show_available_ports() -> None:
        """显示可用的串口"""
        SerialManager.print_available_ports()

    @staticmethod
    def select_port(port: Optional[str] = None) -> Optional[str]:
        """
        确定要使用的串口

        指定了串口时直接使用；否则列出串口让用户选择，绝不自动连接。
        """
        if port:
            print(f"✅ 使用指定串口: {port}")
            return port

        ports = SerialManager.list_available_ports()
        if not ports:
            print("❌ 没有找到可用的串口。")
            print("   请检查:")
            print("   1. 设备是否已通过USB连接")
            print("   2. 串口驱动是否已安装")
            print("   3. 是否有足够的权限访问串口")
            return None

        print("可用的串口列表:")
        for i, info in enumerate(ports, 1):
            print(f"  {i}. {info['device']} - {info['description']}")

        while True:
            try:
                choice = input(f"\n请选择串口号 (1-{len(ports)}): ").strip()
                index = int(choice) - 1
                if 0 <= index < len(ports):
                    selected = ports[index]["device"]
                    print(f"✅ 已选择: {selected}")
                    return selected
                print(f"请输入1到{len(ports)}之间的数字。")
            except ValueError:
                print("请输入有效的数字。")
            except (KeyboardInterrupt, EOFError):
                print("\n用户取消选择")
                return None

    @staticmethod
    def _build_config(
        port: str, baudrate: int, handshake: Optional[str] = None
    ) -> SessionConfig:
        device = DeviceConfig(handshake=handshake) if handshake else DeviceConfig()
        return SessionConfig(serial=SerialConfig(port=port, baudrate=baudrate), device=device)

    @staticmethod
    def verify(port: Optional[str], baudrate: int) -> bool:
        """连接并校验设备"""
        port = PanelPilotCLI.select_port(port)
        if port is None:
            return False

        try:
            with UploadSession(PanelPilotCLI._build_config(port, baudrate)):
                print("✅ 设备校验成功：Panel Pilot SGD")
                return True
        except PanelPilotError as e:
            logger.error(f"设备校验失败: {e}")
            print(f"❌ 设备校验失败: {e}")
            return False

    @staticmethod
    def read(port: Optional[str], baudrate: int, count: int = 1, interval: float = 1.0) -> bool:
        """连接设备并读取电压"""
        port = PanelPilotCLI.select_port(port)
        if port is None:
            return False

        try:
            with UploadSession(PanelPilotCLI._build_config(port, baudrate)) as session:
                for i in range(count):
                    if i:
                        time.sleep(interval)
                    reading = session.read_voltage()
                    if reading is None:
                        print("❌ 读取电压失败")
                        return False
                    print(f"{reading.rdg1}    {reading.rdg2}")
                return True
        except PanelPilotError as e:
            logger.error(f"读取电压失败: {e}")
            print(f"❌ 读取电压失败: {e}")
            return False

    @staticmethod
    def upload(
        port: Optional[str],
        baudrate: int,
        file_path: str,
        handshake: Optional[str] = None,
    ) -> bool:
        """连接设备并上传配置文件"""
        path = Path(file_path)
        if not path.is_file():
            print(f"❌ 配置文件不存在: {file_path}")
            return False

        # 保留原始换行符
        with path.open("r", encoding="utf-8", newline="") as f:
            content = f.read()
        if not content:
            print("❌ 配置文件为空")
            return False

        port = PanelPilotCLI.select_port(port)
        if port is None:
            return False

        print(f"准备上传配置: {path.name} ({len(content.encode('utf-8'))} 字节)")
        session = UploadSession(PanelPilotCLI._build_config(port, baudrate, handshake))
        progress = ProgressBar(total_bytes=len(content.encode("utf-8")))
        try:
            session.connect()
            result = session.upload(content, on_progress=progress.update)
        except PanelPilotError as e:
            progress.finish()
            logger.error(f"上传失败: {e}")
            print(f"❌ 上传失败: {e}")
            print("   请重新连接设备后从头上传")
            return False
        finally:
            session.disconnect()

        progress.finish()
        print(
            f"✅ 配置上传成功！{result.total_packets} 个数据块，"
            f"重传 {result.retries} 次，用时 {result.elapsed:.2f} 秒"
        )
        print("   设备已断开，如需继续操作请重新连接")
        return True
