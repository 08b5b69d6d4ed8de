"""
异常定义
========

串口传输与设备协议的异常层次结构。

PanelPilotError (基类)
├── TransportError (串口传输层)
│   ├── DeviceUnavailableError - 串口不存在或被占用
│   ├── PermissionDeniedError - 无权限访问串口
│   ├── NotSupportedError - 不支持的串口地址或参数
│   ├── NotConnectedError - 在已关闭的连接上操作
│   ├── TransportIOError - 读写失败
│   └── TransportTimeoutError - 等待响应超时
├── TransferError (XMODEM 传输层)
│   ├── ReceiverNotReadyError - 未收到接收端的首个NAK
│   ├── TooManyRetriesError - 单个数据块重试次数超限
│   └── TransferCancelledError - 接收端发送CAN取消传输
└── DeviceVerificationError - 设备不是兼容的 SGD 控制器
"""


class PanelPilotError(Exception):
    """所有异常的基类，调用方可以用一个 except 捕获全部错误"""


class TransportError(PanelPilotError):
    """串口传输层错误"""


class DeviceUnavailableError(TransportError):
    """串口不存在、已断开或被其他程序占用"""


class PermissionDeniedError(TransportError):
    """当前用户无权限打开串口"""


class NotSupportedError(TransportError):
    """不支持的串口地址协议或无效的串口参数"""


class NotConnectedError(TransportError):
    """在未打开或已关闭的连接上进行读写"""


class TransportIOError(TransportError):
    """串口读写失败"""


class TransportTimeoutError(TransportError, TimeoutError):
    """等待设备响应超时"""

    def __init__(self, pattern: str, timeout: float):
        super().__init__(f"等待 {pattern!r} 超时({timeout:.2f}秒)")
        self.pattern = pattern
        self.timeout = timeout


class TransferError(PanelPilotError):
    """XMODEM 传输失败"""


class ReceiverNotReadyError(TransferError):
    """接收端未就绪（未收到NAK）"""


class TooManyRetriesError(TransferError):
    """数据块重试次数超过上限"""

    def __init__(self, packet_number: int, retries: int):
        super().__init__(f"数据块 #{packet_number} 重试 {retries} 次仍失败，传输终止")
        self.packet_number = packet_number
        self.retries = retries


class TransferCancelledError(TransferError):
    """接收端取消了传输"""


class DeviceVerificationError(PanelPilotError):
    """设备校验失败"""
