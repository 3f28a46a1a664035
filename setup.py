from setuptools import setup, find_packages
import os
from glob import glob

package_name = 'potential_path_planner'

setup(
    name=package_name,
    version='0.3.0',
    packages=find_packages(exclude=['test']),
    data_files=[
        ('share/' + package_name + '/config',
         glob('config/*.json') if os.path.exists('config') else []),
    ],
    python_requires='>=3.8',
    install_requires=[
        'setuptools',
        'numpy',
        'scipy',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    zip_safe=True,
    maintainer='Kang Hyunmin',
    maintainer_email='kanghyunmin@example.com',
    description='Potential-field path planning with Catmull-Rom smoothing and a constant-speed path follower',
    license='Apache-2.0',
    entry_points={
        'console_scripts': [
            'potential-planner-sim = potential_path_planner.simulation:main',
        ],
    },
)
