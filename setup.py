"""
TimeTOGO Navigation Backend - Build Script

도착 시각 기반 대중교통 경로 안내 서버 (실시간 위치 추적, 환승 알림, 도보 안내)
"""

from setuptools import setup, find_namespace_packages


setup(
    name='timetogo-navigation',
    version='1.2.0',
    author='TimeTOGO Team',
    description='Live navigation and route progress tracking backend',
    long_description='''
    Arrival-time based transit itinerary tracking: departure detection,
    transfer-point proximity alerts, turn-by-turn walking guidance and
    compass heading smoothing over a FastAPI WebSocket.
    ''',
    # app 하위 일부 디렉토리는 __init__.py 없는 namespace package
    packages=find_namespace_packages(include=['app', 'app.*']),
    install_requires=[
        'fastapi>=0.100.0',
        'uvicorn[standard]>=0.23.0',
        'pydantic>=2.0',
        'redis>=4.5.0',
        'httpx>=0.24.0',
        'python-dotenv>=1.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'pytest-mock>=3.10',
            'pytest-asyncio>=0.21',
        ],
    },
    zip_safe=False,
    python_requires='>=3.9',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Topic :: Scientific/Engineering :: GIS',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
    ],
)
