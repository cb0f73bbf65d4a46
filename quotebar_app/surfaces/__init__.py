"""
Tray, window and clipboard surfaces the engine drives.
"""
