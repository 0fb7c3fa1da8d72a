# /run.py

import subprocess
import threading
import time
import os
import sys

from catalog.config import get_settings

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
settings = get_settings()


def run_fastapi():
  subprocess.run([sys.executable, "-m", "uvicorn", "catalog.main:app", "--host", "0.0.0.0", "--port", str(settings.api_port), "--reload"], cwd=BASE_DIR)

def run_streamlit():
  time.sleep(2)
  subprocess.run([sys.executable, "-m", "streamlit", "run", "catalog/app.py", "--server.port", str(settings.dashboard_port), "--server.address", "0.0.0.0"], cwd=BASE_DIR)

if __name__ == "__main__":

  t1 = threading.Thread(target=run_fastapi)
  t2 = threading.Thread(target=run_streamlit)

  t1.start()
  t2.start()

  t1.join()
  t2.join()
