import os
import PyInstaller.__main__

print("[*] Building vps binary...")

# PyInstaller wants src<pathsep>dest for --add-data (';' on Windows, ':' elsewhere)
script = os.path.join('vpsctl', 'data', 'provision-remote.sh')
PyInstaller.__main__.run([
    os.path.join('vpsctl', '__main__.py'),
    '--name', 'vps',
    '--onefile',
    '--add-data', f"{script}{os.pathsep}{os.path.join('vpsctl', 'data')}",
    '--hidden-import', 'vpsctl',
    '--clean',
    '--log-level', 'WARN',
    '--distpath', 'dist',
    '-y'
])

binary = os.path.join('dist', 'vps.exe' if os.name == 'nt' else 'vps')
if not os.path.exists(binary):
    print(f"[-] Error: {binary} not found")
    exit(1)

print(f"\n[SUCCESS] Built {binary}")
