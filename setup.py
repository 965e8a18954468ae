from setuptools import find_packages, setup

install_requires = ['Pyomo>=6.7', 'highspy>=1.7', 'numpy>=1.23', 'pandas>=1.5', 'matplotlib>=3.6', 'Pillow>=9.0']

setup(name='cardpairs',
      version='0.1',
      description='Card Exchange Pairing Problem',
      install_package_date=True,
      install_requires=install_requires,
      extras_require={'test': ['pytest>=7']},
      license='MIT license',
      keywords='cardpairs card exchange pairing milp',
      packages=find_packages(include=['cardpairs', 'cardpairs.*']),
      entry_points={'console_scripts': ['cardpairs=cardpairs.cli:main']},
      python_requires='>=3.9'
     )
