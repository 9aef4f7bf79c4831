"""Conversion execution: argument building, process supervision and cancellation.

Import submodules directly (mco.executor.command, mco.executor.ffmpeg_runner,
mco.executor.cancellation).
"""
